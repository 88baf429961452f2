"""Tests for team drafting and the teams commands."""
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from bot.cogs import teams as teams_cog
from bot.models import hots_accounts
from bot.services.channels import save_channel
from bot.services.discord_embeds import build_teams_embeds
from bot.services.roster_store import Player, Role
from bot.services.teams import TeamError, TeamSheet, parse_teams_data, player_mmrs


def _sheet(count: int) -> TeamSheet:
    players = [(str(i), Player(f"P{i}", Role.FLEX, active=True)) for i in range(1, count + 1)]
    # Higher user id -> lower MMR, so player numbers match user ids
    mmrs = {str(i): 3000 - i * 10 for i in range(1, count + 1)}
    sheet = TeamSheet()
    sheet.rank(players, mmrs)
    return sheet


def test_parse_teams_data():
    assert parse_teams_data("1 4 6, 2 3") == ([1, 4, 6], [2, 3])
    assert parse_teams_data("1,4;6") == ([1], [4, 6])
    assert parse_teams_data("1 4 6") == ([1, 4, 6], None)
    with pytest.raises(TeamError):
        parse_teams_data(", 2 3")


def test_rank_orders_by_mmr_and_keeps_roster_order_for_ties():
    players = [
        ("a", Player("A", Role.TANK, active=True)),
        ("b", Player("B", Role.HEALER, active=True)),
        ("c", Player("C", Role.FLEX, active=True)),
    ]
    sheet = TeamSheet()
    sheet.rank(players, {"b": 2500})
    assert [(e.number, e.user_id, e.mmr) for e in sheet.ranked] == [(1, "b", 2500), (2, "a", 0), (3, "c", 0)]


def test_draft_ten_players():
    sheet = _sheet(10)
    sheet.draft()
    assert sheet.team1 == [1, 4, 6, 8, 10]
    assert sheet.team2 == [2, 3, 5, 7, 9]
    assert sheet.spectators == []


def test_draft_extra_players_spectate():
    sheet = _sheet(12)
    sheet.draft()
    assert len(sheet.team1) == 5
    assert len(sheet.team2) == 5
    assert [e.number for e in sheet.spectators] == [11, 12]


def test_draft_needs_players():
    with pytest.raises(TeamError, match="Not enough players"):
        TeamSheet().draft()


def test_assign_fills_team2_by_default():
    sheet = _sheet(12)
    sheet.assign([1, 2, 3, 4, 5])
    assert sheet.team1 == [1, 2, 3, 4, 5]
    assert sheet.team2 == [6, 7, 8, 9, 10]


def test_assign_rejects_bad_numbers():
    sheet = _sheet(4)
    with pytest.raises(TeamError, match="Too many players"):
        sheet.assign([1, 2, 3, 4, 4])
    with pytest.raises(TeamError, match="Duplicate player numbers provided: `2`"):
        sheet.assign([1, 2], [2, 3])
    with pytest.raises(TeamError, match="Unknown player numbers: `7`"):
        sheet.assign([1, 7])


def test_swap_between_teams_and_with_spectator():
    sheet = _sheet(11)
    sheet.draft()
    sheet.swap(1, 2)
    assert sheet.team_of(1) == 2
    assert sheet.team_of(2) == 1

    sheet.swap(11, 4)
    assert sheet.team_of(11) == 1
    assert sheet.team_of(4) is None
    assert len(sheet.team1) == 5


def test_swap_rejects_same_team_and_unknown_numbers():
    sheet = _sheet(10)
    sheet.draft()
    with pytest.raises(TeamError, match="same team"):
        sheet.swap(1, 4)
    with pytest.raises(TeamError, match="only 10 players"):
        sheet.swap(1, 11)


def test_teams_embeds():
    sheet = _sheet(11)
    sheet.draft()
    embeds = build_teams_embeds(sheet)
    assert [e.title for e in embeds] == ["Team 1", "💩 Filthy Team 2", "Spectators"]
    assert embeds[0].description.splitlines()[0] == "`1: 2990` <@1> P1 `🔄 Flex`"


@pytest.mark.asyncio
async def test_player_mmrs_uses_best_mode_across_accounts(session):
    for row in (
        {"hots_battle_tag": "Alice#1111", "discord_id": 1001, "HP_QM_MMR": 2400, "HP_SL_MMR": 2100},
        {"hots_battle_tag": "AliceAlt#2222", "discord_id": 1001, "HP_AR_MMR": 2600},
        {"hots_battle_tag": "Bob#3333", "discord_id": 1002},
        {"hots_battle_tag": "Cara#4444", "discord_id": 1003, "HP_QM_MMR": 1800},
    ):
        await session.execute(hots_accounts.insert().values(**row))
    await session.commit()
    assert await player_mmrs(session, ["1001", "1002", "not-an-id"]) == {"1001": 2600, "1002": 0}


@pytest.fixture
def team_interaction(interaction, store):
    for i in range(1, 11):
        store.set(str(i), Player(f"P{i}", Role.FLEX, active=True))
    interaction.client.teams = TeamSheet()
    interaction.response.defer = AsyncMock()
    return interaction


@pytest.mark.asyncio
async def test_draft_command_replies_privately(team_interaction):
    await teams_cog.draft.callback(team_interaction)
    kwargs = team_interaction.response.send_message.await_args.kwargs
    assert kwargs["ephemeral"] is True
    assert len(kwargs["embeds"]) == 2
    assert team_interaction.client.teams.team1 == [1, 4, 6, 8, 10]


@pytest.mark.asyncio
async def test_publish_without_teams(team_interaction):
    await teams_cog.publish_teams.callback(team_interaction)
    team_interaction.response.send_message.assert_awaited_once_with(teams_cog.NO_TEAMS, ephemeral=True)


@pytest.mark.asyncio
async def test_move_to_teams_needs_both_channels(team_interaction, session):
    team_interaction.client.teams.rank(team_interaction.client.roster.active_players(), {})
    team_interaction.client.teams.draft()
    await save_channel(session, "team1", 11, "Team A")

    await teams_cog.move_to_teams.callback(team_interaction)
    message = team_interaction.response.send_message.await_args.args[0]
    assert "Only **Team A** is set" in message


@pytest.mark.asyncio
async def test_move_to_teams_moves_each_team(team_interaction, session):
    sheet = team_interaction.client.teams
    sheet.rank(team_interaction.client.roster.active_players(), {})
    sheet.draft()
    await save_channel(session, "team1", 11, "Team A")
    await save_channel(session, "team2", 22, "Team B")

    channels = {}
    for channel_id in (11, 22):
        channel = MagicMock(spec=discord.VoiceChannel)
        channel.id = channel_id
        channel.mention = f"<#{channel_id}>"
        channels[channel_id] = channel

    members = {}
    for i in range(1, 11):
        member = MagicMock()
        member.mention = f"<@{i}>"
        member.move_to = AsyncMock()
        member.voice.channel.id = 99
        members[i] = member
    members[10].voice = None

    guild = team_interaction.guild
    guild.get_channel.side_effect = channels.get
    guild.get_member.side_effect = members.get

    await teams_cog.move_to_teams.callback(team_interaction)

    members[1].move_to.assert_awaited_once_with(channels[11], reason="Move to Team 1")
    members[2].move_to.assert_awaited_once_with(channels[22], reason="Move to Team 2")
    summary = team_interaction.followup.send.await_args.args[0]
    assert summary.startswith("Moved 9/10 players to <#11>, <#22>.")
    assert "Not in voice: <@10> (P10)" in summary
