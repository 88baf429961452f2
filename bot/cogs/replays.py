"""Replays cog - /set_replay_folder, /replay_folder, /list_replays (Admin only)."""
from __future__ import annotations

import asyncio
import logging

import discord
from discord import app_commands

from bot.checks import admin_only
from bot.models import get_async_session
from bot.services.discord_embeds import build_replays_embed
from bot.services.replays import (
    ReplayParseError,
    list_replay_files,
    parse_replay,
    recent_replays,
    record_replay,
)
from bot.services.settings import get_replay_folder, set_replay_folder

logger = logging.getLogger("norcustoms.replays")

MAX_REPLAYS_PER_RUN = 10


@app_commands.command(name="set_replay_folder", description="Set the folder .StormReplay files are read from (Admin only)")
@app_commands.describe(path="Folder on the bot host")
@app_commands.default_permissions(move_members=True)
@admin_only()
async def set_replay_folder_cmd(interaction: discord.Interaction, path: str) -> None:
    path = path.strip()
    async for session in get_async_session():
        await set_replay_folder(session, path)
        break
    await interaction.response.send_message(f"Replay folder path set to:\n`{path}`", ephemeral=True)


@app_commands.command(description="Show the replay folder (Admin only)")
@app_commands.default_permissions(move_members=True)
@admin_only()
async def replay_folder(interaction: discord.Interaction) -> None:
    async for session in get_async_session():
        folder = await get_replay_folder(session)
        break
    if not folder:
        await interaction.response.send_message(
            "Replay folder path is not set. Please set it using the `/set_replay_folder` command.",
            ephemeral=True,
        )
        return
    await interaction.response.send_message(f"Current replay folder path is:\n`{folder}`", ephemeral=True)


@app_commands.command(description="Import the newest replays from the replay folder and list them (Admin only)")
@app_commands.default_permissions(move_members=True)
@admin_only()
async def list_replays(interaction: discord.Interaction) -> None:
    async for session in get_async_session():
        folder = await get_replay_folder(session)
        break
    if not folder:
        await interaction.response.send_message(
            "Replay folder path is not set. Please set it using the `/set_replay_folder` command.",
            ephemeral=True,
        )
        return

    await interaction.response.defer(ephemeral=True)
    try:
        files = await asyncio.to_thread(list_replay_files, folder)
    except OSError as e:
        logger.error("Error reading replay folder %s: %s", folder, e)
        await interaction.followup.send(
            f"Error reading replay folder. Please make sure the folder path is correct.\n`{folder}`",
            ephemeral=True,
        )
        return
    if not files:
        await interaction.followup.send(f"No .StormReplay files found in the folder:\n`{folder}`", ephemeral=True)
        return

    added = 0
    failed = []
    async for session in get_async_session():
        for path in files[:MAX_REPLAYS_PER_RUN]:
            try:
                data = await asyncio.to_thread(parse_replay, path)
            except ReplayParseError as e:
                logger.warning("%s", e)
                failed.append(path.name)
                continue
            if await record_replay(session, data):
                added += 1
        replays = await recent_replays(session)
        break

    summary = f"Checked {min(len(files), MAX_REPLAYS_PER_RUN)} of {len(files)} replays, {added} new."
    if failed:
        summary += "\nCould not read: " + ", ".join(f"`{name}`" for name in failed)
    await interaction.followup.send(summary, embed=build_replays_embed(replays, folder), ephemeral=True)


COMMANDS = (set_replay_folder_cmd, replay_folder, list_replays)
