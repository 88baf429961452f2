"""Permission checks for slash commands."""
from __future__ import annotations

import discord
from discord import app_commands

import config


def _get_member(interaction: discord.Interaction) -> discord.Member | None:
    if not interaction.guild:
        return None
    return interaction.user if isinstance(interaction.user, discord.Member) else None


def _get_role_ids(member: discord.Member) -> set[int]:
    """Member's role IDs. Reads raw _roles too, since member.roles drops roles missing from the guild cache."""
    ids = {r.id for r in member.roles}
    raw = getattr(member, "_roles", None)
    if raw is not None:
        ids.update(int(r) for r in raw)
    return ids


def _get_role_names(member: discord.Member) -> set[str]:
    return {r.name.lower() for r in member.roles}


async def _get_member_with_roles(interaction: discord.Interaction) -> discord.Member | None:
    """Member with roles. Fetches via REST if the gateway gave us only @everyone."""
    member = _get_member(interaction)
    if not member or not interaction.guild:
        return None
    if len(_get_role_ids(member)) <= 1:
        try:
            member = await interaction.guild.fetch_member(interaction.user.id)
        except discord.NotFound:
            return None
    return member


def is_lobby_admin(member: discord.Member) -> bool:
    """Server admin, a configured admin user, or holder of a configured admin role (by ID or name)."""
    if member.guild_permissions.administrator:
        return True
    if member.id in config.ADMIN_USER_IDS:
        return True
    return bool(_get_role_ids(member) & config.ADMIN_ROLE_IDS) or bool(
        _get_role_names(member) & config.ADMIN_ROLE_NAMES
    )


def admin_only():
    """Check that user is a lobby admin."""

    async def predicate(interaction: discord.Interaction) -> bool:
        if interaction.user.id in config.ADMIN_USER_IDS:
            return True
        member = await _get_member_with_roles(interaction)
        if not member:
            return False
        return is_lobby_admin(member)

    return app_commands.check(predicate)
