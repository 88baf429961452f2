"""Import .StormReplay files into hots_replays.

Usage: python -m scripts.import_replays [FOLDER]   (default: the folder set with /set_replay_folder)
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from bot.models import get_async_session, init_db
from bot.services.replays import ReplayParseError, list_replay_files, parse_replay, record_replay
from bot.services.settings import get_replay_folder

logger = logging.getLogger("norcustoms.replays")


async def run(folder: str | None) -> int:
    """Parse and record every replay in the folder. Returns how many were new."""
    await init_db()
    added = 0
    async for session in get_async_session():
        folder = folder or await get_replay_folder(session)
        if not folder:
            logger.error("No folder given and no replay folder set")
            return -1
        files = list_replay_files(folder)
        logger.info("Found %d replays in %s", len(files), folder)
        for path in files:
            try:
                data = await asyncio.to_thread(parse_replay, path)
            except ReplayParseError as e:
                logger.warning("%s", e)
                continue
            if await record_replay(session, data):
                added += 1
        break
    return added


def main() -> None:
    parser = argparse.ArgumentParser(description="Record .StormReplay files in the database")
    parser.add_argument("folder", nargs="?", help="Replay folder (default: stored replay folder setting)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        added = asyncio.run(run(args.folder))
    except OSError as e:
        logger.error("Could not read replay folder: %s", e)
        sys.exit(1)
    if added < 0:
        sys.exit(2)
    print(f"{added} new replays recorded.")


if __name__ == "__main__":
    main()
