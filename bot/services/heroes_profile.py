"""Heroes Profile API service wrapper with caching and token refresh."""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import aiohttp
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import config
from bot.models import hots_accounts

logger = logging.getLogger("norcustoms.hp")

CACHE_TTL = 300  # 5 minutes
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)

# Game mode names as they appear in the Player/MMR payload
QUICK_MATCH = "Quick Match"
STORM_LEAGUE = "Storm League"
ARAM = "ARAM"

BATTLE_TAG_RULES = (
    "[Naming Rules:](https://us.support.blizzard.com/en/article/26963)\n"
    "* The BattleTag must be between 3-12 characters long.\n"
    "* Accented characters are allowed.\n"
    "* Numbers are allowed, but a BattleTag cannot start with a number.\n"
    "* Mixed capitals are allowed (ex: ZeRgRuSh).\n"
    "* No spaces or symbols are allowed."
)

_INVALID_NAME_CHARS = re.compile(r"[\s!@$%^&*()+=\[\]{};':\"\\|,.<>?/]")


class HeroesProfileError(Exception):
    """Heroes Profile could not be reached or rejected the request."""


@dataclass
class HPData:
    battle_tag: str
    region: int
    url: str
    qm_mmr: Optional[int] = None
    qm_games: Optional[int] = None
    sl_mmr: Optional[int] = None
    sl_games: Optional[int] = None
    ar_mmr: Optional[int] = None
    ar_games: Optional[int] = None


def validate_battle_tag(battle_tag: str) -> list[str]:
    """Check a battle tag against Blizzard's naming rules. Returns the problems found (empty if valid)."""
    errors = []
    if "#" not in battle_tag:
        errors.append("Missing # separator")
    name, _, number = battle_tag.partition("#")

    if len(name) < 3 or len(name) > 12:
        errors.append(f"Name must be 3-12 characters (you have {len(name)})")
    if name[:1].isdigit():
        errors.append("Name cannot start with a number")
    bad = "".join(_INVALID_NAME_CHARS.findall(name))
    if bad:
        errors.append(f"Name contains spaces or invalid symbols (you have: `{bad}`)")

    digits = sum(c.isdigit() for c in number)
    non_digits = "".join(c for c in number if not c.isdigit())
    if digits < 4:
        errors.append(f"Must have at least 4 digits after the # (you have {digits})")
    elif non_digits:
        errors.append(f"Only digits are allowed after the # (you have: `{non_digits}`)")
    return errors


def profile_url(battle_tag: str, region: int) -> str:
    name, _, number = battle_tag.partition("#")
    return f"https://www.heroesprofile.com/Player/{quote(name)}/{number}/{region}"


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def parse_mmr_payload(battle_tag: str, region: int, payload: Any) -> Optional[HPData]:
    """Build HPData from a Player/MMR response. None when the payload has no data for the tag."""
    if not isinstance(payload, dict) or not payload:
        return None
    modes = payload.get(battle_tag)
    if modes is None:
        # Heroes Profile keys the result by its own capitalization of the tag
        modes = next((v for k, v in payload.items() if k.lower() == battle_tag.lower()), None)
    if not isinstance(modes, dict) or not modes:
        return None

    def _mode(name: str) -> tuple[Optional[int], Optional[int]]:
        stats = modes.get(name) or {}
        return _int_or_none(stats.get("mmr")), _int_or_none(stats.get("games_played"))

    qm_mmr, qm_games = _mode(QUICK_MATCH)
    sl_mmr, sl_games = _mode(STORM_LEAGUE)
    ar_mmr, ar_games = _mode(ARAM)
    return HPData(
        battle_tag=battle_tag,
        region=region,
        url=profile_url(battle_tag, region),
        qm_mmr=qm_mmr,
        qm_games=qm_games,
        sl_mmr=sl_mmr,
        sl_games=sl_games,
        ar_mmr=ar_mmr,
        ar_games=ar_games,
    )


class HeroesProfileService:
    """Async Heroes Profile API service with caching."""

    def __init__(self, api_url: Optional[str] = None, token: Optional[str] = None):
        self.api_url = (api_url or config.HEROES_PROFILE_API_URL).rstrip("/")
        self._token = token if token is not None else config.HEROES_PROFILE_API_TOKEN
        self._session: Optional[aiohttp.ClientSession] = None
        self._cache: dict[str, tuple[Optional[HPData], float]] = {}

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=REQUEST_TIMEOUT)
        return self._session

    async def _request(self, battle_tag: str, region: int) -> tuple[int, Any]:
        """GET Player/MMR. Returns (status, json payload or None)."""
        params = {
            "mode": "json",
            "battletag": battle_tag,
            "region": str(region),
            "api_token": self._token,
        }
        async with self._get_session().get(f"{self.api_url}/Player/MMR", params=params) as resp:
            if resp.status != 200:
                return resp.status, None
            return resp.status, await resp.json(content_type=None)

    def _refresh_token(self) -> None:
        self._token = config.reload_heroes_profile_token()
        logger.info("Heroes Profile token reloaded from environment")

    async def get_mmr(self, battle_tag: str, region: Optional[int] = None) -> Optional[HPData]:
        """MMR for a battle tag. None if Heroes Profile has no data for it.

        A 401/403 reloads the token and retries once; anything else that isn't
        a 200 or 404 raises HeroesProfileError.
        """
        region = region if region is not None else config.HEROES_PROFILE_REGION
        key = f"{battle_tag.lower()}:{region}"
        now = time.time()
        if key in self._cache:
            data, ts = self._cache[key]
            if now - ts < CACHE_TTL:
                return data
            del self._cache[key]

        refreshed = False
        while True:
            try:
                status, payload = await self._request(battle_tag, region)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning("Heroes Profile request for %s failed: %s", battle_tag, e)
                raise HeroesProfileError("Heroes Profile data unavailable") from e
            if status in (401, 403) and not refreshed:
                logger.warning("Heroes Profile returned %s for %s - refreshing token", status, battle_tag)
                self._refresh_token()
                refreshed = True
                continue
            break

        if status == 404:
            data = None
        elif status != 200:
            logger.error("Heroes Profile returned %s for %s", status, battle_tag)
            raise HeroesProfileError(f"Heroes Profile data unavailable (HTTP {status})")
        else:
            data = parse_mmr_payload(battle_tag, region, payload)
        self._cache[key] = (data, now)
        return data


async def upsert_account(
    session: AsyncSession, data: HPData, discord_id: Optional[int] = None
) -> None:
    """Store a lookup result on the account for its battle tag, creating the account if needed."""
    values = {
        "HP_URL": data.url,
        "HP_QM_MMR": data.qm_mmr,
        "HP_QM_Games": data.qm_games,
        "HP_SL_MMR": data.sl_mmr,
        "HP_SL_Games": data.sl_games,
        "HP_AR_MMR": data.ar_mmr,
        "HP_AR_Games": data.ar_games,
    }
    result = await session.execute(
        select(hots_accounts.c.id, hots_accounts.c.discord_id).where(
            hots_accounts.c.hots_battle_tag == data.battle_tag
        )
    )
    row = result.first()
    if row is None:
        await session.execute(
            hots_accounts.insert().values(
                hots_battle_tag=data.battle_tag,
                discord_id=discord_id,
                is_primary=discord_id is not None,
                **values,
            )
        )
    else:
        if discord_id is not None and row.discord_id is None:
            values["discord_id"] = discord_id
        await session.execute(
            hots_accounts.update().where(hots_accounts.c.id == row.id).values(**values)
        )
    await session.commit()
