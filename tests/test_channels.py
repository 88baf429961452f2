"""Tests for the channel registry and settings."""
import pytest

from bot.models.channel import LOBBY_TAG
from bot.services.channels import get_all_channels, get_channels, save_channel
from bot.services.settings import get_replay_folder, get_setting, set_replay_folder, set_setting


@pytest.mark.asyncio
async def test_save_and_get_channel(session):
    await save_channel(session, LOBBY_TAG, 111, "Lobby")
    channels = await get_channels(session, [LOBBY_TAG])
    assert len(channels) == 1
    assert channels[0].channel_id == 111
    assert channels[0].channel_name == "Lobby"


@pytest.mark.asyncio
async def test_save_channel_last_write_wins(session):
    await save_channel(session, LOBBY_TAG, 111, "Lobby")
    await save_channel(session, LOBBY_TAG, 222, "New Lobby")
    all_channels = await get_all_channels(session)
    assert list(all_channels) == [LOBBY_TAG]
    assert all_channels[LOBBY_TAG].channel_id == 222


@pytest.mark.asyncio
async def test_get_channels_keeps_requested_order(session):
    await save_channel(session, "team1", 1, "Team 1")
    await save_channel(session, "team2", 2, "Team 2")
    channels = await get_channels(session, ["team2", "lobby", "team1"])
    assert [c.tag for c in channels] == ["team2", "team1"]


@pytest.mark.asyncio
async def test_settings(session):
    assert await get_setting(session, "missing") is None
    await set_setting(session, "k", "v1")
    await set_setting(session, "k", "v2")
    assert await get_setting(session, "k") == "v2"


@pytest.mark.asyncio
async def test_replay_folder(session):
    assert await get_replay_folder(session) is None
    await set_replay_folder(session, "/replays")
    assert await get_replay_folder(session) == "/replays"
