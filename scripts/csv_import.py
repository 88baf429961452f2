"""Stats CSV import tool.

Usage: python -m scripts.csv_import [missing-from-db|missing-from-csv|check-matches|import-csv|all] [--csv PATH]
"""
import argparse
import asyncio
import logging
import sys

import config
from bot.models import get_async_session, init_db
from bot.services.csv_import import LOOKUP, PLAYER, CSVImporter

logger = logging.getLogger("norcustoms.csv")

COMMANDS = ("missing-from-db", "missing-from-csv", "check-matches", "import-csv", "all")


async def run(command: str, importer: CSVImporter) -> None:
    await init_db()
    async for session in get_async_session():
        if command in ("missing-from-db", "all"):
            rows = await importer.find_missing_from_database(session)
            print(f"Found {len(rows)} accounts in CSV but missing from database:")
            for row in rows:
                print(f"  - {row[LOOKUP]}\t\t{row.get(PLAYER, '')}")
            print()
        if command in ("missing-from-csv", "all"):
            tags = await importer.find_missing_from_csv(session)
            print(f"Found {len(tags)} accounts in database but not in CSV:")
            for tag in tags:
                print(f"  - {tag}")
            print()
        if command in ("check-matches", "all"):
            tags = await importer.find_matching_records(session)
            print(f"Found {len(tags)} accounts with matching data:")
            for tag in tags:
                print(f"  - {tag}")
            print()
        if command in ("import-csv", "all"):
            updated = await importer.transfer_matching_data(session)
            print(f"Successfully updated {updated} accounts.")
        break


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconcile the stats spreadsheet with hots_accounts")
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--csv", default=str(config.CSV_PATH), help="CSV export to read (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    importer = CSVImporter(args.csv)
    try:
        asyncio.run(run(args.command, importer))
    except FileNotFoundError:
        logger.error("CSV file not found: %s", args.csv)
        sys.exit(1)


if __name__ == "__main__":
    main()
