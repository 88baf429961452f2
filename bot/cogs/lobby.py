"""Lobby cog - /join, /leave, /rejoin, /name, /role, /players, /players_all, /clear, /guide."""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

from bot import router
from bot.services import lobby
from bot.services.announce import announce
from bot.services.discord_embeds import build_button_view, build_guide_embed
from bot.services.lobby import Outcome
from bot.services.roster_store import Role, RosterStore

logger = logging.getLogger("norcustoms.lobby")

ROLE_CHOICES = [app_commands.Choice(name=r.label, value=r.value) for r in Role]


def get_roster(interaction: discord.Interaction) -> RosterStore:
    return interaction.client.roster


def _view_kwargs(view: Optional[discord.ui.View]) -> dict:
    return {"view": view} if view is not None else {}


async def send_outcome(interaction: discord.Interaction, outcome: Outcome) -> None:
    """Private reply, then the optional echo and the public announcement.

    The roster is already committed when this runs; announcement failures are logged by announce().
    """
    kwargs = _view_kwargs(build_button_view(outcome.buttons))
    if interaction.response.is_done():
        await interaction.followup.send(outcome.reply, ephemeral=True, **kwargs)
    else:
        await interaction.response.send_message(outcome.reply, ephemeral=True, **kwargs)
    if outcome.public_echo:
        await interaction.followup.send(outcome.public_echo, ephemeral=True)
    if outcome.announcement:
        await announce(
            interaction.guild,
            outcome.announcement,
            view=build_button_view(outcome.announcement_buttons),
        )


async def run_intent(interaction: discord.Interaction, intent) -> Optional[Outcome]:
    """Dispatch an intent for the invoking user, save if the roster changed, and respond."""
    store = get_roster(interaction)
    user_id = str(interaction.user.id)
    outcome = router.dispatch(store, user_id, intent)
    if outcome is None:
        return None
    if outcome.changed:
        await store.save_async()
    logger.debug("%s by %s: %s", type(intent).__name__, user_id, outcome.reply.splitlines()[0])
    await send_outcome(interaction, outcome)
    return outcome


async def run_command(interaction: discord.Interaction, name: str, **options: str) -> Optional[Outcome]:
    try:
        intent = router.parse_command(name, options)
    except ValueError:
        await interaction.response.send_message(
            "Pick one of the listed roles: " + ", ".join(r.label for r in Role), ephemeral=True
        )
        return None
    return await run_intent(interaction, intent)


@app_commands.command(description="Join the lobby with your in-game name and role")
@app_commands.describe(username="Your in-game name", role="The role you want to play")
@app_commands.choices(role=ROLE_CHOICES)
async def join(interaction: discord.Interaction, username: str, role: app_commands.Choice[str]) -> None:
    """Join (or re-join with new details). Overwrites any previous name and role."""
    if not username.strip():
        await interaction.response.send_message("Please provide your in-game name.", ephemeral=True)
        return
    await run_command(interaction, lobby.JOIN, username=username, role=role.value)


@app_commands.command(description="Leave the lobby (your name and role are kept)")
async def leave(interaction: discord.Interaction) -> None:
    await run_command(interaction, lobby.LEAVE)


@app_commands.command(description="Rejoin the lobby with your previous name and role")
async def rejoin(interaction: discord.Interaction) -> None:
    await run_command(interaction, lobby.REJOIN)


@app_commands.command(description="Change your in-game name")
@app_commands.describe(username="Your new in-game name")
async def name(interaction: discord.Interaction, username: str) -> None:
    if not username.strip():
        await interaction.response.send_message("Please provide your in-game name.", ephemeral=True)
        return
    await run_command(interaction, lobby.NAME, username=username)


@app_commands.command(description="Change your role")
@app_commands.describe(role="The role you want to play")
@app_commands.choices(role=ROLE_CHOICES)
async def role(interaction: discord.Interaction, role: app_commands.Choice[str]) -> None:
    await run_command(interaction, lobby.ROLE, role=role.value)


@app_commands.command(description="List the players in the lobby")
async def players(interaction: discord.Interaction) -> None:
    await run_command(interaction, lobby.PLAYERS)


@app_commands.command(description="List everyone who has ever joined, including inactive players")
async def players_all(interaction: discord.Interaction) -> None:
    await run_command(interaction, lobby.PLAYERS_ALL)


@app_commands.command(description="Remove everyone from the lobby")
@app_commands.default_permissions(move_members=True)
@app_commands.guild_only()
async def clear(interaction: discord.Interaction) -> None:
    """Mark every player inactive. Names and roles are kept for /rejoin."""
    await run_command(interaction, lobby.CLEAR)


@app_commands.command(description="How to use the lobby")
async def guide(interaction: discord.Interaction) -> None:
    await interaction.response.send_message(
        embed=build_guide_embed(),
        view=build_button_view((lobby.REJOIN, lobby.PLAYERS)),
        ephemeral=True,
    )


COMMANDS = (join, leave, rejoin, name, role, players, players_all, clear, guide)
