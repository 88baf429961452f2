"""Channels cog - register the lobby/team voice channels and move players between them."""
from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

import discord
from discord import app_commands

from bot.models import get_async_session
from bot.models.channel import LOBBY_TAG, TEAM_TAGS
from bot.services.channels import get_channels, save_channel
from bot.services.roster_store import Player

logger = logging.getLogger("norcustoms.channels")

TEAM_CHOICES = [
    app_commands.Choice(name=f"Team {i}", value=tag) for i, tag in enumerate(TEAM_TAGS, start=1)
]


async def move_players(
    guild: discord.Guild,
    players: Iterable[Tuple[str, Player]],
    channel: discord.VoiceChannel,
    reason: str,
) -> Tuple[int, List[str], List[str]]:
    """Move roster players who are in voice to a channel.

    Returns (moved, not in voice, failed); the lists hold mentions for the reply.
    Players already in the channel count as moved.
    """
    moved = 0
    not_in_voice = []
    failures = []
    for user_id, player in players:
        member = guild.get_member(int(user_id))
        if member is None or member.voice is None or member.voice.channel is None:
            not_in_voice.append(f"<@{user_id}> ({player.username})")
            continue
        if member.voice.channel.id == channel.id:
            moved += 1
            continue
        try:
            await member.move_to(channel, reason=reason)
            moved += 1
        except discord.HTTPException as e:
            logger.warning("Could not move %s (%s): %s", player.username, user_id, e)
            failures.append(f"{member.mention} ({player.username})")
    return moved, not_in_voice, failures


@app_commands.command(description="Set the voice channel players gather in")
@app_commands.describe(channel="Lobby voice channel")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
async def set_lobby_channel(interaction: discord.Interaction, channel: discord.VoiceChannel) -> None:
    async for session in get_async_session():
        await save_channel(session, LOBBY_TAG, channel.id, channel.name)
        break
    await interaction.response.send_message(f"Lobby channel set to {channel.mention}.", ephemeral=True)


@app_commands.command(description="Set the voice channel for a team")
@app_commands.describe(team="Which team", channel="Team voice channel")
@app_commands.choices(team=TEAM_CHOICES)
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
async def set_team_channel(
    interaction: discord.Interaction,
    team: app_commands.Choice[str],
    channel: discord.VoiceChannel,
) -> None:
    async for session in get_async_session():
        await save_channel(session, team.value, channel.id, channel.name)
        break
    await interaction.response.send_message(f"{team.name} channel set to {channel.mention}.", ephemeral=True)


@app_commands.command(description="Move every active lobby player in voice to the lobby channel")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
async def move_all_to_lobby(interaction: discord.Interaction) -> None:
    """Players not connected to voice are skipped; move failures are listed."""
    guild = interaction.guild
    async for session in get_async_session():
        found = await get_channels(session, [LOBBY_TAG])
        break
    if not found:
        await interaction.response.send_message(
            "No lobby channel set. Use `/set_lobby_channel` first.", ephemeral=True
        )
        return
    lobby_channel = guild.get_channel(found[0].channel_id)
    if not isinstance(lobby_channel, discord.VoiceChannel):
        await interaction.response.send_message(
            f"The lobby channel **{found[0].channel_name}** no longer exists. Set it again.", ephemeral=True
        )
        return

    await interaction.response.defer(ephemeral=True)
    moved, _, failures = await move_players(
        guild, interaction.client.roster.active_players(), lobby_channel, "Move all to lobby"
    )

    lines = [f"Moved {moved}/{moved + len(failures)} players in voice to {lobby_channel.mention}."]
    if failures:
        lines.append("Could not move: " + ", ".join(failures))
    await interaction.followup.send("\n".join(lines), ephemeral=True)


@app_commands.command(description="Move a member to a voice channel")
@app_commands.describe(user="Member to move", channel="Destination voice channel")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
async def move(interaction: discord.Interaction, user: discord.Member, channel: discord.VoiceChannel) -> None:
    if user.voice is None or user.voice.channel is None:
        await interaction.response.send_message(f"{user.mention} is not in a voice channel.", ephemeral=True)
        return
    try:
        await user.move_to(channel, reason=f"Moved by {interaction.user}")
    except discord.HTTPException as e:
        logger.warning("Could not move %s to %s: %s", user, channel.name, e)
        await interaction.response.send_message(f"Could not move {user.mention}: {e}", ephemeral=True)
        return
    await interaction.response.send_message(f"Moved {user.mention} to {channel.mention}.", ephemeral=True)


COMMANDS = (set_lobby_channel, set_team_channel, move_all_to_lobby, move)
