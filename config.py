"""Configuration for the Nor Customs lobby bot."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"  # Also suppresses pings in announcements

# Text channel the bot announces lobby changes in (created on guild join)
BOT_CHANNEL_NAME = os.getenv("BOT_CHANNEL_NAME", "🫠-nor-customs")

# Storage
STORE_DIR = Path(os.getenv("STORE_DIR", str(Path(__file__).parent / "store")))
STORE_DIR.mkdir(parents=True, exist_ok=True)
ROSTER_PATH = Path(os.getenv("ROSTER_PATH", str(STORE_DIR / "players.json")))
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{STORE_DIR / 'nor_customs.db'}",
)
CSV_PATH = Path(os.getenv("CSV_PATH", str(STORE_DIR / "stats.csv")))

# Heroes Profile API
HEROES_PROFILE_API_URL = os.getenv("HEROES_PROFILE_API_URL", "https://api.heroesprofile.com/api")
HEROES_PROFILE_API_TOKEN = os.getenv("HEROES_PROFILE_API_TOKEN", "")
HEROES_PROFILE_REGION = int(os.getenv("HEROES_PROFILE_REGION", "1"))  # 1 = Americas


def reload_heroes_profile_token() -> str:
    """Re-read the Heroes Profile token from .env so a rotated token is picked up without a restart."""
    global HEROES_PROFILE_API_TOKEN
    load_dotenv(override=True)
    HEROES_PROFILE_API_TOKEN = os.getenv("HEROES_PROFILE_API_TOKEN", "")
    return HEROES_PROFILE_API_TOKEN


# Role IDs or names (comma-separated). Names are case-insensitive.
def _parse_role_ids(value: str) -> set[int]:
    if not value:
        return set()
    result = set()
    for x in value.split(","):
        try:
            result.add(int(x.strip()))
        except ValueError:
            continue
    return result


def _parse_role_names(value: str) -> set[str]:
    if not value:
        return set()
    return {x.strip().lower() for x in value.split(",") if x.strip()}


ADMIN_ROLE_IDS = _parse_role_ids(os.getenv("ADMIN_ROLE_IDS", ""))
ADMIN_ROLE_NAMES = _parse_role_names(os.getenv("ADMIN_ROLE_NAMES", ""))

# User IDs that bypass role checks (lobby hosts)
ADMIN_USER_IDS = _parse_role_ids(os.getenv("ADMIN_USER_IDS", ""))
