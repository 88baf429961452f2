"""Tests for bot startup and shutdown around the roster snapshot."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from discord.ext import commands

import config
from bot import main as bot_main
from bot.main import NorCustomsBot
from bot.services.roster_store import Player, Role, RosterLoadError, RosterStore


@pytest.fixture
def bot(tmp_path):
    b = NorCustomsBot()
    b.roster = RosterStore(tmp_path / "players.json")
    return b


@pytest.mark.asyncio
async def test_unreadable_snapshot_aborts_setup_and_is_not_overwritten(bot):
    bot.roster.path.write_text("{not json", encoding="utf-8")
    before = bot.roster.path.read_bytes()

    with pytest.raises(RosterLoadError):
        await bot.setup_hook()
    assert bot.roster_loaded is False

    with patch.object(commands.Bot, "close", new=AsyncMock()) as parent_close:
        await bot.close()
    parent_close.assert_awaited_once()

    assert bot.roster.path.read_bytes() == before
    assert not bot.roster.staging_path.exists()


@pytest.mark.asyncio
async def test_close_saves_a_loaded_roster(bot):
    bot.roster_loaded = True
    bot.roster.set("1", Player("Alice", Role.TANK, active=True))

    with patch.object(commands.Bot, "close", new=AsyncMock()):
        await bot.close()

    reloaded = RosterStore(bot.roster.path)
    reloaded.load()
    assert reloaded.get("1") == Player("Alice", Role.TANK, active=True)


def test_main_exits_with_status_1_when_roster_unreadable():
    fake_bot = MagicMock()
    fake_bot.run.side_effect = RosterLoadError("Roster snapshot unreadable")
    with patch.object(config, "DISCORD_TOKEN", "token"), patch.object(
        bot_main, "NorCustomsBot", return_value=fake_bot
    ):
        with pytest.raises(SystemExit) as exc:
            bot_main.main()
    assert exc.value.code == 1
