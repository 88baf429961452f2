"""Tests for the roster store and its JSON snapshot."""
import asyncio
import json
import os
import time
from unittest.mock import patch

import pytest

from bot.services.roster_store import Player, Presence, Role, RosterLoadError, RosterStore


def test_role_parse_and_labels():
    assert Role.parse("T") is Role.TANK
    assert Role.HEALER.label == "💉 Healer"
    assert Role.is_symbol("F")
    assert not Role.is_symbol("X")
    with pytest.raises(ValueError):
        Role.parse("X")


def test_presence(store):
    assert store.presence("1") is Presence.ABSENT
    store.set("1", Player("Alice", Role.TANK, active=False))
    assert store.presence("1") is Presence.INACTIVE
    store.get("1").active = True
    assert store.presence("1") is Presence.ACTIVE


def test_active_players_and_deactivate_all(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    store.set("2", Player("Bob", Role.HEALER, active=False))
    store.set("3", Player("Cara", Role.FLEX, active=True))
    assert [uid for uid, _ in store.active_players()] == ["1", "3"]

    assert store.deactivate_all() == 2
    assert store.active_players() == []
    # Records are kept
    assert len(store) == 3
    assert store.get("1").username == "Alice"


def test_save_then_load_round_trip(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    store.set("2", Player("Bob", Role.FLEX, active=False))
    assert store.save()

    loaded = RosterStore(store.path)
    loaded.load()
    assert loaded.snapshot() == store.snapshot()


def test_snapshot_format(store):
    store.set("42", Player("Alice", Role.ASSASSIN, active=True))
    store.save()
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == {"42": {"username": "Alice", "role": "A", "active": True}}
    assert not store.staging_path.exists()


def test_crash_before_rename_keeps_old_snapshot(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    store.save()

    store.get("1").active = False
    with patch("bot.services.roster_store.os.replace", side_effect=OSError("disk gone")):
        assert store.save() is False

    loaded = RosterStore(store.path)
    loaded.load()
    assert loaded.get("1").active is True


def test_crash_after_rename_has_new_snapshot(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    store.save()
    store.get("1").active = False
    store.save()

    loaded = RosterStore(store.path)
    loaded.load()
    assert loaded.get("1").active is False


def test_load_falls_back_to_staging(store):
    store.path.write_text("{not json", encoding="utf-8")
    store.staging_path.write_text(
        json.dumps({"7": {"username": "Bob", "role": "H", "active": True}}), encoding="utf-8"
    )
    store.load()
    assert store.get("7") == Player("Bob", Role.HEALER, active=True)


def test_load_fails_when_both_unreadable(store):
    store.path.write_text("{not json", encoding="utf-8")
    store.staging_path.write_text("[]", encoding="utf-8")
    with pytest.raises(RosterLoadError):
        store.load()


def test_load_rejects_unknown_role(store):
    store.path.write_text(json.dumps({"1": {"username": "A", "role": "Z", "active": True}}), encoding="utf-8")
    with pytest.raises(RosterLoadError):
        store.load()


def test_load_without_files_starts_empty(store):
    store.load()
    assert len(store) == 0


@pytest.mark.asyncio
async def test_save_async(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    assert await store.save_async()
    assert store.path.exists()


@pytest.mark.asyncio
async def test_overlapping_saves_leave_a_readable_snapshot(store):
    real_fsync = os.fsync

    def slow_fsync(fd):
        time.sleep(0.05)
        real_fsync(fd)

    store.set("1", Player("Alice" * 40, Role.TANK, active=True))
    with patch("bot.services.roster_store.os.fsync", side_effect=slow_fsync):
        first = asyncio.create_task(store.save_async())
        await asyncio.sleep(0)
        store.set("2", Player("Bob", Role.HEALER, active=True))
        second = asyncio.create_task(store.save_async())
        results = await asyncio.gather(first, second)

    assert results == [True, True]
    assert not store.staging_path.exists()
    loaded = RosterStore(store.path)
    loaded.load()
    assert loaded.snapshot() == store.snapshot()


@pytest.mark.asyncio
async def test_sync_and_async_saves_do_not_interleave(store):
    store.set("1", Player("Alice", Role.TANK, active=True))
    await asyncio.gather(store.save_async(), asyncio.to_thread(store.save), store.save_async())
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == {"1": {"username": "Alice", "role": "T", "active": True}}
