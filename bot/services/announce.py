"""Public lobby announcements in the guild's bot channel. Best-effort: never raises."""
from __future__ import annotations

import logging
from typing import Optional

import discord

import config

logger = logging.getLogger("norcustoms.announce")


def find_bot_channel(guild: Optional[discord.Guild]) -> Optional[discord.TextChannel]:
    if guild is None:
        return None
    return discord.utils.get(guild.text_channels, name=config.BOT_CHANNEL_NAME)


async def announce(
    guild: Optional[discord.Guild],
    message: str,
    view: Optional[discord.ui.View] = None,
) -> Optional[discord.Message]:
    """Post a notice in the bot channel. Returns the sent message, or None when nothing was sent."""
    channel = find_bot_channel(guild)
    if channel is None:
        logger.info("No #%s channel in %s - announcement skipped", config.BOT_CHANNEL_NAME, guild)
        return None
    kwargs = {}
    if view is not None:
        kwargs["view"] = view
    if config.DEBUG:
        # Testing on a live server shouldn't ping people
        kwargs["allowed_mentions"] = discord.AllowedMentions.none()
        kwargs["silent"] = True
    try:
        return await channel.send(message, **kwargs)
    except discord.HTTPException as e:
        logger.warning("Announcement failed in #%s: %s", channel.name, e)
        return None


async def ensure_bot_channel(guild: discord.Guild) -> Optional[discord.TextChannel]:
    """Create the bot channel if the guild doesn't have one yet."""
    channel = find_bot_channel(guild)
    if channel is not None:
        return channel
    try:
        channel = await guild.create_text_channel(config.BOT_CHANNEL_NAME)
    except discord.HTTPException as e:
        logger.warning("Could not create #%s in %s: %s", config.BOT_CHANNEL_NAME, guild.name, e)
        return None
    logger.info("Created #%s in %s", config.BOT_CHANNEL_NAME, guild.name)
    return channel
