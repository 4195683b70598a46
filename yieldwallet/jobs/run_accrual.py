"""
Run the daily accrual batch once, outside the API process.

Usage:
    python -m yieldwallet.jobs.run_accrual
    python -m yieldwallet.jobs.run_accrual --date 2026-01-15
    python -m yieldwallet.jobs.run_accrual --dry-run

Meant for system cron when the in-process scheduler is disabled. Running it
twice for the same date pays nothing the second time. Exits 1 if any
position failed, so cron can alert; failed positions are retried by the
next run.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date

from yieldwallet.clock import utc_today
from yieldwallet.config import settings
from yieldwallet.database import AsyncSessionLocal, engine
from yieldwallet.services.accrual_service import find_due_positions, run_accrual_batch

logger = logging.getLogger("yieldwallet.jobs.run_accrual")


async def _dry_run(run_date: date) -> int:
    async with AsyncSessionLocal() as db:
        positions = await find_due_positions(db, run_date)

    print(f"{len(positions)} positions due on {run_date}")
    for position in positions:
        print(
            f"  {position.id}  user={position.user_id}  "
            f"daily={position.daily_profit_cents}  days_remaining={position.days_remaining}"
        )
    return 0


async def _run(run_date: date, dry_run: bool) -> int:
    try:
        if dry_run:
            return await _dry_run(run_date)

        report = await run_accrual_batch(AsyncSessionLocal, run_date)
        print(
            f"Accrual for {report.run_date}: {report.processed} processed, "
            f"{report.completed} completed, {report.skipped} skipped, "
            f"{len(report.failures)} failed"
        )
        for failure in report.failures:
            print(f"  FAILED {failure.position_id}: {failure.error}")
        return 1 if report.failures else 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Pay one day of profit on every due position")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Business date to pay (YYYY-MM-DD, default: today in UTC)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the positions that would be paid without changing anything",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run_date = args.date or utc_today()
    return asyncio.run(_run(run_date, args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
