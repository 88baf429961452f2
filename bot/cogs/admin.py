"""Admin cog - /admin role|active|name for another player, /new_game, /sync (Admin only)."""
from __future__ import annotations

import logging

import discord
from discord import app_commands

from bot.checks import admin_only
from bot.cogs.lobby import ROLE_CHOICES, get_roster
from bot.services import lobby
from bot.services.announce import announce
from bot.services.discord_embeds import build_button_view
from bot.services.lobby import Outcome
from bot.services.roster_store import Role

logger = logging.getLogger("norcustoms.admin")

admin_group = app_commands.Group(
    name="admin",
    description="Manage another player's lobby entry (Admin only)",
    default_permissions=discord.Permissions(move_members=True),
    guild_only=True,
)


async def _apply(interaction: discord.Interaction, outcome: Outcome) -> None:
    if outcome.changed:
        await get_roster(interaction).save_async()
    await interaction.response.send_message(outcome.reply, ephemeral=True)
    if outcome.announcement:
        await announce(
            interaction.guild,
            outcome.announcement,
            view=build_button_view(outcome.announcement_buttons),
        )


@admin_group.command(name="role", description="Change a player's role")
@app_commands.describe(user="Player to change", role="New role")
@app_commands.choices(role=ROLE_CHOICES)
@admin_only()
async def admin_role(
    interaction: discord.Interaction, user: discord.Member, role: app_commands.Choice[str]
) -> None:
    outcome = lobby.admin_set_role(get_roster(interaction), str(user.id), Role.parse(role.value))
    logger.info("%s set role of %s to %s", interaction.user, user, role.value)
    await _apply(interaction, outcome)


@admin_group.command(name="active", description="Add a player to or remove them from the lobby")
@app_commands.describe(user="Player to change", active="True to add to the lobby, False to remove")
@admin_only()
async def admin_active(interaction: discord.Interaction, user: discord.Member, active: bool) -> None:
    outcome = lobby.admin_set_active(get_roster(interaction), str(user.id), active)
    logger.info("%s set active of %s to %s", interaction.user, user, active)
    await _apply(interaction, outcome)


@admin_group.command(name="name", description="Change a player's in-game name")
@app_commands.describe(user="Player to change", username="New in-game name")
@admin_only()
async def admin_name(interaction: discord.Interaction, user: discord.Member, username: str) -> None:
    username = username.strip()
    if not username:
        await interaction.response.send_message("Please provide a name.", ephemeral=True)
        return
    outcome = lobby.admin_set_name(get_roster(interaction), str(user.id), username)
    logger.info("%s set name of %s to %s", interaction.user, user, username)
    await _apply(interaction, outcome)


@app_commands.command(description="Start a new game: everyone is marked inactive and asked to rejoin")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
@admin_only()
async def new_game(interaction: discord.Interaction) -> None:
    outcome = lobby.new_game(get_roster(interaction))
    logger.info("New game started by %s", interaction.user)
    await _apply(interaction, outcome)


@app_commands.command(description="Sync slash commands to this server (Admin only)")
@app_commands.default_permissions(move_members=True)
@admin_only()
async def sync(interaction: discord.Interaction) -> None:
    """Manually sync slash commands to the current guild. Use if new commands don't appear."""
    guild = interaction.guild
    if not guild:
        await interaction.response.send_message("Run this in a server.", ephemeral=True)
        return
    await interaction.response.defer(ephemeral=True)
    try:
        interaction.client.tree.copy_global_to(guild=guild)
        synced = await interaction.client.tree.sync(guild=guild)
    except discord.HTTPException as e:
        logger.warning("Sync to %s failed: %s", guild.name, e)
        await interaction.followup.send(f"Sync failed: {e}", ephemeral=True)
        return
    await interaction.followup.send(f"{len(synced)} commands synced to **{guild.name}**.", ephemeral=True)


COMMANDS = (admin_group, new_game, sync)
