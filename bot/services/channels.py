"""Channel registry - voice channels registered under a tag (lobby, team1, team2)."""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bot.models import Channel

logger = logging.getLogger("norcustoms.channels")


async def save_channel(session: AsyncSession, tag: str, channel_id: int, channel_name: str) -> Channel:
    """Upsert the channel for a tag. Last write wins."""
    channel = await session.get(Channel, tag)
    if channel:
        channel.channel_id = channel_id
        channel.channel_name = channel_name
    else:
        channel = Channel(tag=tag, channel_id=channel_id, channel_name=channel_name)
        session.add(channel)
    await session.commit()
    logger.info("Channel %s set to %s (%s)", tag, channel_name, channel_id)
    return channel


async def get_channels(session: AsyncSession, tags: Iterable[str]) -> list[Channel]:
    """Channels for the given tags, in the order asked. Unregistered tags are left out."""
    tags = list(tags)
    result = await session.execute(select(Channel).where(Channel.tag.in_(tags)))
    by_tag = {c.tag: c for c in result.scalars().all()}
    return [by_tag[t] for t in tags if t in by_tag]


async def get_all_channels(session: AsyncSession) -> dict[str, Channel]:
    result = await session.execute(select(Channel).order_by(Channel.tag))
    return {c.tag: c for c in result.scalars().all()}
