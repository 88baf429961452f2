"""Channel registry model - maps a channel-role tag (lobby, team1, team2) to a Discord channel."""
from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from bot.models.base import Base

LOBBY_TAG = "lobby"
TEAM_TAGS = ("team1", "team2")


class Channel(Base):
    """Voice channel registered under a tag. Upserted by tag."""

    __tablename__ = "channels"

    tag: Mapped[str] = mapped_column(String(32), primary_key=True)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    channel_name: Mapped[str] = mapped_column(String(128), nullable=False)
