"""Stats spreadsheet import - reconcile a CSV export against hots_accounts and copy the stats over.

The spreadsheet has one row per battle tag (the `Lookup` column) with a
display name (`Player`), the Heroes Profile link (`HP url`) and the columns
listed in bot.models.hots_account.IMPORT_COLUMNS.
"""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bot.models import hots_accounts
from bot.models.hots_account import IMPORT_COLUMNS

logger = logging.getLogger("norcustoms.csv")

LOOKUP = "Lookup"
PLAYER = "Player"
HP_URL = "HP url"

_EMPTY = ("", "None")


def parse_value(value: Optional[str]) -> Union[float, str, None]:
    """Number with thousands separators removed, the raw text if it isn't numeric, or None when empty."""
    if value is None or value.strip() in _EMPTY:
        return None
    value = value.strip()
    try:
        return float(value.replace(",", ""))
    except ValueError:
        return value


def parse_percentage(value: Optional[str]) -> Optional[float]:
    """'52.3%' -> 52.3. Anything unparseable is None."""
    if value is None or value.strip() in _EMPTY:
        return None
    try:
        return float(value.strip().replace("%", "").replace(",", ""))
    except ValueError:
        return None


def convert(value: Optional[str], kind: str):
    """Convert a spreadsheet cell for a column of the given kind (int, real, pct, text)."""
    if kind == "pct":
        return parse_percentage(value)
    if kind == "text":
        if value is None or value.strip() in _EMPTY:
            return None
        return value.strip()
    parsed = parse_value(value)
    if kind == "int" and isinstance(parsed, float):
        return int(parsed)
    if isinstance(parsed, str):
        # Non-numeric text in a numeric column
        return None
    return parsed


class CSVImporter:
    """Compare and import a stats CSV. All methods re-read the file so edits are picked up."""

    def __init__(self, csv_path: Union[str, Path]):
        self.csv_path = Path(csv_path)

    def read_csv(self) -> list[dict[str, str]]:
        with self.csv_path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            rows = []
            for row in reader:
                row = {(k or "").strip(): (v or "").strip() for k, v in row.items()}
                if row.get(LOOKUP):
                    rows.append(row)
        logger.debug("Read %d rows from %s", len(rows), self.csv_path)
        return rows

    async def _battle_tags(self, session: AsyncSession) -> list[str]:
        result = await session.execute(
            select(hots_accounts.c.hots_battle_tag).order_by(hots_accounts.c.id)
        )
        return [row[0] for row in result.all()]

    async def find_missing_from_database(self, session: AsyncSession) -> list[dict[str, str]]:
        """CSV rows whose battle tag has no account."""
        known = set(await self._battle_tags(session))
        missing = [row for row in self.read_csv() if row[LOOKUP] not in known]
        logger.info("%d accounts in CSV but missing from database", len(missing))
        return missing

    async def find_missing_from_csv(self, session: AsyncSession) -> list[str]:
        """Account battle tags that have no CSV row."""
        lookups = {row[LOOKUP] for row in self.read_csv()}
        missing = [tag for tag in await self._battle_tags(session) if tag not in lookups]
        logger.info("%d accounts in database but not in CSV", len(missing))
        return missing

    async def find_matching_records(self, session: AsyncSession) -> list[str]:
        """Account battle tags that also appear in the CSV."""
        lookups = {row[LOOKUP] for row in self.read_csv()}
        matching = [tag for tag in await self._battle_tags(session) if tag in lookups]
        logger.info("%d accounts with matching data", len(matching))
        return matching

    async def transfer_matching_data(self, session: AsyncSession) -> int:
        """Copy stats from the CSV onto matching accounts. Returns how many accounts were updated."""
        known = set(await self._battle_tags(session))
        rows = [row for row in self.read_csv() if row[LOOKUP] in known]
        if not rows:
            logger.info("No matching accounts found. Nothing to transfer.")
            return 0

        updated = 0
        for row in rows:
            values = {"HP_URL": row.get(HP_URL) or None}
            for column, header, kind in IMPORT_COLUMNS:
                if header in row:
                    values[column] = convert(row[header], kind)
            result = await session.execute(
                hots_accounts.update()
                .where(hots_accounts.c.hots_battle_tag == row[LOOKUP])
                .values(**values)
            )
            if result.rowcount:
                updated += 1
                logger.debug("Updated %s", row[LOOKUP])
        await session.commit()
        logger.info("Updated %d out of %d accounts", updated, len(rows))
        return updated
