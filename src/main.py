"""Main entry point with CLI."""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import SALES_DB, Config
from src.errors import GuildSalesError
from src.logging_conf import setup_logging
from src.jobs.importer import ImportRunner
from src.reports.builder import guild_item_week_report, guild_week_report
from src.store.report_storage import ReportStorage
from src.store.sales_db import SalesDB

import logging

logger = logging.getLogger(__name__)

REPORTS = ("guild-weeks", "guild-item-weeks", "items", "guild-items")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Guild sales importer and weekly reports")

    parser.add_argument(
        "--db",
        type=Path,
        default=SALES_DB,
        help=f"SQLite database path (default: {SALES_DB})",
    )
    parser.add_argument(
        "--import-file",
        type=Path,
        action="append",
        default=[],
        help="Saved-variables dump to import (repeatable)",
    )
    parser.add_argument(
        "--report",
        choices=REPORTS,
        default=None,
        help="Report to print after importing",
    )
    parser.add_argument(
        "--guild-id",
        type=int,
        default=None,
        help="Limit item reports to one guild",
    )
    parser.add_argument(
        "--item-order",
        choices=("value", "recent"),
        default="value",
        help="Order of the items report (default: value)",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Also save the report as JSON under data/reports/",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print item and sale counts",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    return parser.parse_args(argv)


async def _build_report(
    db: SalesDB, name: str, guild_id: int | None, item_order: str = "value"
) -> list:
    if name == "guild-weeks":
        return await guild_week_report(db)
    if name == "guild-item-weeks":
        return await guild_item_week_report(db, guild_id=guild_id)
    if name == "items":
        return await db.load_item_summaries(guild_id, order=item_order)
    summaries = await db.load_guild_item_summaries()
    if guild_id is not None:
        summaries = [s for s in summaries if s.guild_id == guild_id]
    return summaries


async def run(args: argparse.Namespace) -> None:
    db = SalesDB(args.db)
    await db.initialize()

    runner = ImportRunner(db)
    for path in args.import_file:
        result = await runner.run(path)
        print(
            f"{path.name}: {result.parsed} sales parsed, "
            f"{result.inserted} imported, {result.skipped} duplicates skipped"
        )

    if args.report:
        rows = await _build_report(db, args.report, args.guild_id, args.item_order)
        for row in rows:
            print(row.model_dump_json())
        if args.export:
            ReportStorage().save_report(args.report.replace("-", "_"), rows)

    if args.stats:
        total_items = await db.count_items()
        total_sales = await db.count_sales()
        print(f"Total Items: {total_items:,} | Total Sales: {total_sales:,}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if not args.import_file and not args.report and not args.stats:
        logger.error("Nothing to do: pass --import-file, --report or --stats")
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except GuildSalesError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
