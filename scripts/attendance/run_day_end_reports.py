"""Run the day-end attendance reports by hand.

Usage:
    python scripts/attendance/run_day_end_reports.py --date 2025-03-13 --dry-run
"""

import argparse
import asyncio
import os
import sys

# Add backend root to path so we can import modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from libs.common.logging import configure_logging
from libs.db.config import dispose_engine
from services.attendance_service.tasks import run_day_end_reports


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--date", help="Attendance date (YYYY-MM-DD); defaults to today")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate scopes and list planned sends without writing or emailing",
    )
    return parser.parse_args(argv)


async def run(date, dry_run):
    try:
        return await run_day_end_reports(date, dry_run=dry_run)
    finally:
        await dispose_engine()


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()
    summary = asyncio.run(run(args.date, args.dry_run))
    if summary is None:
        print("No database session available")
        return 1
    print(summary.model_dump_json(indent=2))
    return 1 if summary.failed_count else 0


if __name__ == "__main__":
    sys.exit(main())
