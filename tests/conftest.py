"""Pytest configuration and fixtures."""
import os
import tempfile

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORE_DIR"] = tempfile.mkdtemp(prefix="norcustoms-test-")
os.environ["DEBUG"] = "false"
os.environ["HEROES_PROFILE_API_TOKEN"] = "test-token"

from unittest.mock import AsyncMock, MagicMock

import pytest

from bot.models.base import Base, engine, init_db
from bot.services.roster_store import RosterStore


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh tables for each test."""
    await init_db()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def session():
    from bot.models import get_async_session

    async for s in get_async_session():
        yield s
        break


@pytest.fixture
def store(tmp_path):
    return RosterStore(tmp_path / "players.json")


@pytest.fixture
def interaction(store):
    """Slash command / button interaction with a fresh roster on the client."""
    inter = MagicMock()
    inter.user.id = 1001
    inter.client.roster = store
    inter.response.is_done.return_value = False
    inter.response.send_message = AsyncMock()
    inter.followup.send = AsyncMock()
    inter.guild = MagicMock()
    return inter
