"""Teams cog - /draft, /set_teams, /swap, /publish_teams, /move_to_teams (Admin only)."""
from __future__ import annotations

import logging

import discord
from discord import app_commands

from bot.checks import admin_only
from bot.cogs.channels import move_players
from bot.models import get_async_session
from bot.models.channel import TEAM_TAGS
from bot.services.channels import get_channels
from bot.services.discord_embeds import build_teams_embeds
from bot.services.teams import TeamError, TeamSheet, parse_teams_data, player_mmrs

logger = logging.getLogger("norcustoms.teams")

NO_TEAMS = "No teams yet. Use `/draft` or `/set_teams` first."


def get_teams(interaction: discord.Interaction) -> TeamSheet:
    return interaction.client.teams


async def rank_active_players(interaction: discord.Interaction) -> TeamSheet:
    """Re-number the active lobby by MMR on the bot's team sheet."""
    sheet = get_teams(interaction)
    active = interaction.client.roster.active_players()
    async for session in get_async_session():
        mmrs = await player_mmrs(session, [uid for uid, _ in active])
        break
    sheet.rank(active, mmrs)
    return sheet


async def show_teams(interaction: discord.Interaction, sheet: TeamSheet, publish: bool = False) -> None:
    await interaction.response.send_message(embeds=build_teams_embeds(sheet), ephemeral=not publish)


@app_commands.command(description="Draft two teams from the active players by MMR (Admin only)")
@app_commands.describe(publish="Post the teams in this channel instead of only showing them to you")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def draft(interaction: discord.Interaction, publish: bool = False) -> None:
    sheet = await rank_active_players(interaction)
    try:
        sheet.draft()
    except TeamError as e:
        await interaction.response.send_message(str(e), ephemeral=True)
        return
    logger.info("Teams drafted by %s: %s vs %s", interaction.user.id, sheet.team1, sheet.team2)
    await show_teams(interaction, sheet, publish)


@app_commands.command(description="Pick the teams by player number (Admin only)")
@app_commands.describe(teams_data="Team 1 numbers, then optionally a comma and team 2 numbers (e.g. 1 4 6 8 10, 2 3 5 7 9)")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def set_teams(interaction: discord.Interaction, teams_data: str) -> None:
    try:
        team1, team2 = parse_teams_data(teams_data)
        sheet = await rank_active_players(interaction)
        sheet.assign(team1, team2)
    except TeamError as e:
        await interaction.response.send_message(str(e), ephemeral=True)
        return
    logger.info("Teams set by %s: %s vs %s", interaction.user.id, sheet.team1, sheet.team2)
    await show_teams(interaction, sheet)


@app_commands.command(description="Swap two players between the teams (Admin only)")
@app_commands.describe(player_a="Player number", player_b="Player number")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def swap(interaction: discord.Interaction, player_a: int, player_b: int) -> None:
    sheet = get_teams(interaction)
    if sheet.is_empty:
        await interaction.response.send_message(NO_TEAMS, ephemeral=True)
        return
    try:
        sheet.swap(player_a, player_b)
    except TeamError as e:
        await interaction.response.send_message(str(e), ephemeral=True)
        return
    await show_teams(interaction, sheet)


@app_commands.command(description="Post the current teams in this channel (Admin only)")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def publish_teams(interaction: discord.Interaction) -> None:
    sheet = get_teams(interaction)
    if sheet.is_empty:
        await interaction.response.send_message(NO_TEAMS, ephemeral=True)
        return
    await show_teams(interaction, sheet, publish=True)


@app_commands.command(description="Move each team's players in voice to their team channel (Admin only)")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def move_to_teams(interaction: discord.Interaction) -> None:
    sheet = get_teams(interaction)
    if sheet.is_empty:
        await interaction.response.send_message(NO_TEAMS, ephemeral=True)
        return
    async for session in get_async_session():
        found = await get_channels(session, list(TEAM_TAGS))
        break
    if not found:
        await interaction.response.send_message(
            "No team channels set. Use `/set_team_channel` first.", ephemeral=True
        )
        return
    if len(found) < len(TEAM_TAGS):
        await interaction.response.send_message(
            "You need to set both team channels with `/set_team_channel`. "
            f"Only **{found[0].channel_name}** is set.",
            ephemeral=True,
        )
        return

    guild = interaction.guild
    channels = []
    for registered in found:
        channel = guild.get_channel(registered.channel_id)
        if not isinstance(channel, discord.VoiceChannel):
            await interaction.response.send_message(
                f"The team channel **{registered.channel_name}** no longer exists. Set it again.", ephemeral=True
            )
            return
        channels.append(channel)

    await interaction.response.defer(ephemeral=True)
    moved = 0
    total = 0
    not_in_voice = []
    failures = []
    for team, channel in enumerate(channels, start=1):
        members = [(e.user_id, e.player) for e in sheet.members(team)]
        total += len(members)
        team_moved, team_absent, team_failed = await move_players(guild, members, channel, f"Move to Team {team}")
        moved += team_moved
        not_in_voice += team_absent
        failures += team_failed

    lines = [f"Moved {moved}/{total} players to {', '.join(c.mention for c in channels)}."]
    if not_in_voice:
        lines.append("Not in voice: " + ", ".join(not_in_voice))
    if failures:
        lines.append("Could not move: " + ", ".join(failures))
    await interaction.followup.send("\n".join(lines), ephemeral=True)


COMMANDS = (draft, set_teams, swap, publish_teams, move_to_teams)
