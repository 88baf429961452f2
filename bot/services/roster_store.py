"""Lobby roster - in-memory player map with an atomic JSON snapshot on disk.

The player map is shared by every interaction handler and is not locked: two
interactions for the same user that interleave at an await point are
last-write-wins. Snapshot writes are serialized so the file on disk is always
one complete roster.
"""
from __future__ import annotations

import asyncio
import enum
import json
import logging
import os
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger("norcustoms.roster")


class Role(str, enum.Enum):
    """Lobby role. Value is the one-letter symbol used in button ids and the snapshot."""

    TANK = "T"
    ASSASSIN = "A"
    BRUISER = "B"
    HEALER = "H"
    FLEX = "F"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Role from its symbol. Raises ValueError for anything else."""
        return cls(value)

    @classmethod
    def is_symbol(cls, value: str) -> bool:
        return value in cls._value2member_map_


ROLE_LABELS = {
    Role.TANK: "🛡️ Tank",
    Role.ASSASSIN: "⚔️ Assassin",
    Role.BRUISER: "💪 Bruiser",
    Role.HEALER: "💉 Healer",
    Role.FLEX: "🔄 Flex",
}


class Presence(enum.Enum):
    """Where a user is in the lobby state machine."""

    ABSENT = "absent"
    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass
class Player:
    username: str
    role: Role = Role.FLEX
    active: bool = False

    def to_json(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_json(cls, data: dict) -> "Player":
        return cls(
            username=str(data["username"]),
            role=Role.parse(data.get("role", Role.FLEX.value)),
            active=bool(data.get("active", False)),
        )


class RosterLoadError(RuntimeError):
    """Neither the snapshot nor its staging copy could be read."""


class RosterStore:
    """Player records keyed by Discord user id (as a string).

    Records are never removed, only deactivated, so a player keeps their
    username and role across leave/rejoin.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.staging_path = self.path.with_name(self.path.name + ".tmp")
        self._players: Dict[str, Player] = {}
        self._save_lock = asyncio.Lock()
        self._write_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[str]:
        return iter(self._players)

    def get(self, user_id: str) -> Optional[Player]:
        """Stored player, or None. Mutating the returned object mutates the roster."""
        return self._players.get(user_id)

    def set(self, user_id: str, player: Player) -> None:
        """Full overwrite. Only join (and admin overrides) replace a record."""
        self._players[user_id] = player

    def presence(self, user_id: str) -> Presence:
        player = self._players.get(user_id)
        if player is None:
            return Presence.ABSENT
        return Presence.ACTIVE if player.active else Presence.INACTIVE

    def snapshot(self) -> List[Tuple[str, Player]]:
        return list(self._players.items())

    def active_players(self) -> List[Tuple[str, Player]]:
        return [(uid, p) for uid, p in self._players.items() if p.active]

    def deactivate_all(self) -> int:
        """Mark every player inactive. Returns how many were active."""
        count = 0
        for player in self._players.values():
            if player.active:
                player.active = False
                count += 1
        return count

    def to_json(self) -> str:
        return json.dumps(
            {uid: p.to_json() for uid, p in self._players.items()},
            ensure_ascii=False,
            indent=2,
        )

    def save(self) -> bool:
        """Write the whole roster to the staging file, then atomically replace the snapshot.

        Failures are logged and reported as False; the in-memory roster stays authoritative.
        """
        return self._write(self.to_json(), len(self._players))

    def _write(self, data: str, count: int) -> bool:
        # One writer at a time: every save shares the staging file
        with self._write_lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.staging_path.open("w", encoding="utf-8") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(self.staging_path, self.path)
            except OSError:
                logger.exception("Failed to save roster to %s", self.path)
                return False
        logger.debug("Roster saved (%d players)", count)
        return True

    async def save_async(self) -> bool:
        """Serialize on the event loop, then write on a worker thread.

        Saves are queued behind each other, so the last one to finish always
        holds the newest roster.
        """
        async with self._save_lock:
            data = self.to_json()
            return await asyncio.to_thread(self._write, data, len(self._players))

    def load(self) -> None:
        """Hydrate from the snapshot, falling back to the staging file.

        A fresh install (no files at all) starts empty. Any file that exists
        but cannot be read raises RosterLoadError when no fallback works,
        since starting empty would silently drop the lobby history.
        """
        if not self.path.exists() and not self.staging_path.exists():
            logger.warning("No roster snapshot at %s - starting with an empty lobby", self.path)
            self._players = {}
            return

        errors = []
        for candidate in (self.path, self.staging_path):
            try:
                players = self._read(candidate)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error("Could not read roster file %s: %s", candidate, e)
                errors.append(f"{candidate}: {e}")
                continue
            self._players = players
            logger.info("Loaded %d players from %s", len(players), candidate)
            return

        raise RosterLoadError("Roster snapshot unreadable - " + "; ".join(errors))

    @staticmethod
    def _read(path: Path) -> Dict[str, Player]:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError("snapshot is not a JSON object")
        return {str(uid): Player.from_json(data) for uid, data in raw.items()}
