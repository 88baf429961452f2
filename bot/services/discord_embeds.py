"""Shared Discord embed and button-row building for lobby replies, teams, lookups and replays."""
from __future__ import annotations

from typing import Iterable, Sequence

import discord

from bot.services import lobby
from bot.services.roster_store import Role
from bot.services.teams import TEAM_SIZE

# Seconds a button row stays registered with discord.py
BUTTON_VIEW_TIMEOUT = 15 * 60

_BUTTON_STYLES = {
    lobby.JOIN: discord.ButtonStyle.success,
    lobby.REJOIN: discord.ButtonStyle.success,
    lobby.LEAVE: discord.ButtonStyle.danger,
}


def button_label(custom_id: str) -> str:
    """Label for a lobby button id. Role symbols use the role label."""
    if Role.is_symbol(custom_id):
        return Role.parse(custom_id).label
    return lobby.BUTTON_LABELS.get(custom_id, custom_id)


def build_button_view(custom_ids: Iterable[str]) -> discord.ui.View | None:
    """Action row for the given button ids, or None when there are none.

    The buttons carry no callbacks; presses are routed by the interaction listener,
    which still sees them after the view expires.
    """
    custom_ids = list(custom_ids)
    if not custom_ids:
        return None
    view = discord.ui.View(timeout=BUTTON_VIEW_TIMEOUT)
    for custom_id in custom_ids:
        view.add_item(
            discord.ui.Button(
                label=button_label(custom_id),
                custom_id=custom_id,
                style=_BUTTON_STYLES.get(custom_id, discord.ButtonStyle.secondary),
            )
        )
    return view


def build_guide_embed() -> discord.Embed:
    """How-to for players new to the lobby."""
    embed = discord.Embed(
        title="Nor Customs - How it works",
        description="Sign up for the next custom game with the commands below. "
        "Everything you do is private; the lobby channel only sees joins and leaves.",
        color=discord.Color.blue(),
    )
    embed.add_field(
        name="Joining",
        value="`/join username role` - join with your in-game name and role\n"
        "`/leave` - leave the lobby (your name and role are kept)\n"
        "`/rejoin` - come back with your saved name and role",
        inline=False,
    )
    embed.add_field(
        name="Changing your details",
        value="`/name username` - change your in-game name\n`/role role` - change your role",
        inline=False,
    )
    embed.add_field(
        name="Roles",
        value="\n".join(f"`{r.value}` {r.label}" for r in Role),
        inline=False,
    )
    embed.add_field(name="Who's playing?", value="`/players` - list everyone in the lobby", inline=False)
    embed.add_field(
        name="MMR",
        value="`/lookup battle_tag` - fetch Heroes Profile MMR for a battle tag",
        inline=False,
    )
    return embed


def _format_mmr(mmr, games) -> str:
    if mmr is None:
        return "—"
    if games is None:
        return str(mmr)
    return f"{mmr} ({games} games)"


def build_lookup_embed(data, member: discord.abc.User | None = None) -> discord.Embed:
    """Embed for a Heroes Profile MMR result (bot.services.heroes_profile.HPData)."""
    embed = discord.Embed(title=f"MMR — {data.battle_tag}", url=data.url, color=discord.Color.green())
    if member is not None:
        embed.add_field(name="Discord", value=member.mention, inline=False)
    embed.add_field(name="Quick Match", value=_format_mmr(data.qm_mmr, data.qm_games), inline=True)
    embed.add_field(name="Storm League", value=_format_mmr(data.sl_mmr, data.sl_games), inline=True)
    embed.add_field(name="ARAM", value=_format_mmr(data.ar_mmr, data.ar_games), inline=True)
    embed.set_footer(text="Data from Heroes Profile")
    embed.timestamp = discord.utils.utcnow()
    return embed


def build_replays_embed(replays: Sequence, folder: str | None) -> discord.Embed:
    """Embed listing recently recorded replays (bot.models.HotsReplay rows)."""
    lines = []
    for r in replays:
        date = r.game_date.strftime("%Y-%m-%d %H:%M")
        winner = f"team {r.winning_team + 1} won" if r.winning_team is not None else "no result"
        lines.append(f"**{r.map_name}** ({r.game_mode}) • {date} • {winner}")
    embed = discord.Embed(
        title="Recorded replays",
        description="\n".join(lines) or "(none)",
        color=discord.Color.purple(),
    )
    embed.set_footer(text=f"Replay folder: {folder or 'not set'}")
    return embed


def _team_line(entry, with_role: bool = True) -> str:
    line = f"`{entry.number}: {entry.mmr}` <@{entry.user_id}> {entry.player.username}"
    return line + f" `{entry.player.role.label}`" if with_role else line


def build_teams_embeds(sheet) -> list[discord.Embed]:
    """Team 1, Team 2 and (when anyone is left over) Spectators, from a bot.services.teams.TeamSheet."""
    embeds = []
    for team, title, color in ((1, "Team 1", 0x0099FF), (2, "💩 Filthy Team 2", 0x8B4513)):
        members = sheet.members(team)
        if len(members) != TEAM_SIZE:
            title += f" ({len(members)} players)"
        embeds.append(
            discord.Embed(
                title=title,
                description="\n".join(_team_line(e) for e in members) or "* No players in this team",
                color=discord.Color(color),
            )
        )
    spectators = sheet.spectators
    if spectators:
        embeds.append(
            discord.Embed(
                title="Spectators",
                description="\n".join(_team_line(e, with_role=False) for e in spectators),
                color=discord.Color(0x909000),
            )
        )
    return embeds
