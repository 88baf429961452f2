"""Heroes of the Storm replay parsing (.StormReplay) and recording.

Replays are MPQ archives; mpyq reads them and heroprotocol decodes the
build-specific structures inside.
"""
from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

import mpyq
from heroprotocol.versions import build, latest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bot.models import HotsReplay, HotsReplayPlayer

logger = logging.getLogger("norcustoms.replays")

REPLAY_SUFFIX = ".StormReplay"
GAME_LOOPS_PER_SECOND = 16
_FILETIME_EPOCH = datetime(1601, 1, 1)
RESULT_WIN = 1

GAME_MODES = {
    50001: "Quick Match",
    50021: "Versus AI",
    50031: "Brawl",
    50041: "Practice",
    50051: "Unranked Draft",
    50061: "Hero League",
    50071: "Team League",
    50091: "Storm League",
    50101: "ARAM",
}
CUSTOM = "Custom"


class ReplayParseError(Exception):
    """File is not a readable .StormReplay."""


@dataclass
class ReplayPlayer:
    name: str
    hero: str
    team: int
    won: bool


@dataclass
class ReplayData:
    replay_id: str
    file_path: str
    map_name: str
    game_mode: str
    game_date: datetime
    game_length: int  # seconds
    winning_team: Optional[int]
    players: list[ReplayPlayer] = field(default_factory=list)

    @property
    def player_names(self) -> str:
        """Comma-separated names, team 0 first."""
        ordered = sorted(self.players, key=lambda p: p.team)
        return ",".join(p.name for p in ordered)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value or "")


def filetime_to_datetime(value: int) -> datetime:
    """Windows FILETIME (100ns ticks since 1601) to a naive UTC datetime."""
    return _FILETIME_EPOCH + timedelta(microseconds=value // 10)


def game_mode_name(amm_id: Optional[int]) -> str:
    if amm_id is None:
        return CUSTOM
    return GAME_MODES.get(amm_id, CUSTOM)


def compute_replay_id(details: dict, initdata: dict) -> str:
    """Stable id from the lobby's random value and the players' toon ids, the same for every copy of a game."""
    description = initdata.get("m_syncLobbyState", {}).get("m_gameDescription", {})
    random_value = description.get("m_randomValue", 0)
    toons = sorted(
        f"{t.get('m_region', 0)}-{_text(t.get('m_programId'))}-{t.get('m_realm', 0)}-{t.get('m_id', 0)}"
        for t in (p.get("m_toon", {}) for p in details.get("m_playerList", []))
    )
    digest = hashlib.sha256(f"{random_value}:{','.join(toons)}".encode("utf-8"))
    return digest.hexdigest()


def build_replay_data(path: str, header: dict, details: dict, initdata: dict) -> ReplayData:
    """ReplayData from decoded header/details/initdata structures."""
    players = []
    winning_team = None
    for p in details.get("m_playerList", []):
        team = int(p.get("m_teamId", 0))
        won = p.get("m_result") == RESULT_WIN
        if won:
            winning_team = team
        players.append(
            ReplayPlayer(name=_text(p.get("m_name")), hero=_text(p.get("m_hero")), team=team, won=won)
        )
    options = (
        initdata.get("m_syncLobbyState", {}).get("m_gameDescription", {}).get("m_gameOptions", {})
    )
    return ReplayData(
        replay_id=compute_replay_id(details, initdata),
        file_path=str(path),
        map_name=_text(details.get("m_title")),
        game_mode=game_mode_name(options.get("m_ammId")),
        game_date=filetime_to_datetime(int(details.get("m_timeUTC", 0))),
        game_length=int(header.get("m_elapsedGameLoops", 0)) // GAME_LOOPS_PER_SECOND,
        winning_team=winning_team,
        players=players,
    )


def parse_replay(path: str | os.PathLike) -> ReplayData:
    """Read and decode a .StormReplay file. Blocking; run it in a worker thread from async code.

    Raises ReplayParseError for unreadable files or replay builds heroprotocol doesn't know.
    """
    path = str(path)
    try:
        archive = mpyq.MPQArchive(path)
        header = latest().decode_replay_header(archive.header["user_data_header"]["content"])
        protocol = build(header["m_version"]["m_baseBuild"])
        details = protocol.decode_replay_details(archive.read_file("replay.details"))
        initdata = protocol.decode_replay_initdata(archive.read_file("replay.initData"))
    except ImportError as e:
        # heroprotocol ships one module per game build
        raise ReplayParseError(f"Unsupported replay build: {path}") from e
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise ReplayParseError(f"Could not read replay {path}: {e}") from e
    return build_replay_data(path, header, details, initdata)


def list_replay_files(folder: str | os.PathLike) -> list[Path]:
    """.StormReplay files in a folder, newest first. Raises OSError if the folder can't be read."""
    files = [p for p in Path(folder).iterdir() if p.is_file() and p.name.endswith(REPLAY_SUFFIX)]
    files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return files


async def record_replay(session: AsyncSession, data: ReplayData) -> bool:
    """Store a parsed replay and its players. Returns False if the replay id is already recorded."""
    existing = await session.execute(select(HotsReplay.id).where(HotsReplay.replay_id == data.replay_id))
    if existing.scalar_one_or_none() is not None:
        logger.debug("Replay %s already recorded", data.replay_id)
        return False
    replay = HotsReplay(
        replay_id=data.replay_id,
        file_path=data.file_path,
        player_names=data.player_names,
        game_date=data.game_date,
        map_name=data.map_name,
        game_mode=data.game_mode,
        game_length=data.game_length,
        winning_team=data.winning_team,
        players=[
            HotsReplayPlayer(name=p.name, hero=p.hero, team=p.team, won=p.won) for p in data.players
        ],
    )
    session.add(replay)
    await session.commit()
    logger.info("Recorded replay %s (%s, %s)", data.replay_id, data.map_name, data.game_mode)
    return True


async def recent_replays(session: AsyncSession, limit: int = 10) -> list[HotsReplay]:
    result = await session.execute(
        select(HotsReplay).order_by(HotsReplay.game_date.desc()).limit(limit)
    )
    return list(result.scalars().all())
