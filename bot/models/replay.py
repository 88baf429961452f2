"""Replay models - one row per parsed .StormReplay plus its players. Append-only."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bot.models.base import Base


class HotsReplay(Base):
    """Parsed replay match."""

    __tablename__ = "hots_replays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    replay_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    player_names: Mapped[str] = mapped_column(Text, nullable=False)  # comma-separated, team 0 first
    game_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    map_name: Mapped[str] = mapped_column(String(64), nullable=False)
    game_mode: Mapped[str] = mapped_column(String(32), nullable=False)
    game_length: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds
    winning_team: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 0 or 1

    players = relationship(
        "HotsReplayPlayer", back_populates="replay", cascade="all, delete-orphan"
    )


class HotsReplayPlayer(Base):
    """Player line of a replay."""

    __tablename__ = "hots_replay_players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    replay_id: Mapped[int] = mapped_column(ForeignKey("hots_replays.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    hero: Mapped[str] = mapped_column(String(64), nullable=False)
    team: Mapped[int] = mapped_column(Integer, nullable=False)
    won: Mapped[bool] = mapped_column(Boolean, default=False)

    replay: Mapped["HotsReplay"] = relationship("HotsReplay", back_populates="players")
