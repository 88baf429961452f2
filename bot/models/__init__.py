"""Database models."""
from bot.models.base import Base, get_async_session, init_db
from bot.models.channel import Channel
from bot.models.hots_account import hots_accounts
from bot.models.replay import HotsReplay, HotsReplayPlayer
from bot.models.setting import Setting

__all__ = [
    "Base",
    "Channel",
    "HotsReplay",
    "HotsReplayPlayer",
    "Setting",
    "hots_accounts",
    "get_async_session",
    "init_db",
]
