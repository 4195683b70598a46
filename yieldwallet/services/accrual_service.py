"""
Accrual service: the daily batch that pays profit on running positions.

A run for `run_date` does:

  1. Select every position that is due:
         status = 'active'
         AND days_remaining > 0
         AND (last_accrual_date IS NULL OR last_accrual_date < run_date)
  2. For each due position, in its OWN session and its OWN transaction
     (accrue_position):
       - advance the position with one conditional UPDATE that only
         matches while it is still due
         (days_remaining -= 1, total_profit_earned += daily_profit,
         last_accrual_date = run_date, status = 'completed' at zero)
       - credit the owner's wallet with the daily profit
       - append a completed "profit" entry to the transaction log
  3. Report how many positions were processed, completed, skipped and
     which ones failed.

Idempotency:
  last_accrual_date is written in the same transaction as the payout. A
  second run for the same date finds nothing due, and a position that a
  concurrent run advanced between steps 1 and 2 matches no row in the
  UPDATE and is
  skipped. No position is ever paid twice for one date.

Failure isolation:
  A failing position rolls back only its own transaction. Its
  last_accrual_date is untouched, so the next run picks it up again. The
  batch can also be stopped between positions at any time; committed
  positions simply stop being due.

Daily profit is a fixed amount per day. Nothing compares cumulative profit
with the plan's advertised total_roi_cents.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select, update, case, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from yieldwallet.clock import utc_today
from yieldwallet.database import AsyncSessionLocal, atomic
from yieldwallet.models.position import InvestmentPosition, PositionStatus
from yieldwallet.models.transaction import TransactionType
from yieldwallet.services import transaction_service, wallet_service

logger = logging.getLogger(__name__)


@dataclass
class AccrualFailure:
    position_id: uuid.UUID
    error: str


@dataclass
class AccrualReport:
    """Outcome of one batch run."""

    run_date: date
    processed: int = 0
    # Positions that reached maturity during this run (subset of processed)
    completed: int = 0
    # Due at selection time but advanced by someone else before we got there
    skipped: int = 0
    failures: list[AccrualFailure] = field(default_factory=list)


def _is_due(run_date: date):
    """SQL predicate for positions owed a payout on run_date."""
    return (
        (InvestmentPosition.status == PositionStatus.ACTIVE)
        & (InvestmentPosition.days_remaining > 0)
        & or_(
            InvestmentPosition.last_accrual_date.is_(None),
            InvestmentPosition.last_accrual_date < run_date,
        )
    )


async def find_due_positions(
    db: AsyncSession,
    run_date: date,
) -> list[InvestmentPosition]:
    """Positions owed a payout on run_date, oldest purchase first."""
    result = await db.execute(
        select(InvestmentPosition)
        .where(_is_due(run_date))
        .order_by(InvestmentPosition.created_at.asc())
    )
    return list(result.scalars().all())


async def accrue_position(
    db: AsyncSession,
    position_id: uuid.UUID,
    run_date: date,
) -> InvestmentPosition | None:
    """
    Advance one position by one day and pay its daily profit.

    Runs as one atomic() unit: the position update, the wallet credit and the
    profit entry commit together or not at all.

    Returns:
        The updated position, or None if it was no longer due (already
        advanced for run_date, completed, or gone).
    """
    async with atomic(db):
        result = await db.execute(
            update(InvestmentPosition)
            .where(InvestmentPosition.id == position_id)
            .where(_is_due(run_date))
            .values(
                days_remaining=InvestmentPosition.days_remaining - 1,
                total_profit_earned_cents=(
                    InvestmentPosition.total_profit_earned_cents
                    + InvestmentPosition.daily_profit_cents
                ),
                last_accrual_date=run_date,
                status=case(
                    (InvestmentPosition.days_remaining == 1, PositionStatus.COMPLETED.value),
                    else_=InvestmentPosition.status,
                ),
            )
            .returning(InvestmentPosition)
        )
        position = result.scalar_one_or_none()

        # Another run already paid this position for run_date
        if position is None:
            return None

        await wallet_service.adjust_balance(
            db, position.user_id, position.daily_profit_cents
        )
        await transaction_service.append(
            db,
            user_id=position.user_id,
            txn_type=TransactionType.PROFIT,
            amount_cents=position.daily_profit_cents,
            description="Daily profit from investment plan",
        )

    if position.status == PositionStatus.COMPLETED:
        logger.info(
            f"Position {position.id} of user {position.user_id} completed, "
            f"total profit {position.total_profit_earned_cents}"
        )
    else:
        logger.debug(
            f"Position {position.id} paid {position.daily_profit_cents} to user "
            f"{position.user_id}, {position.days_remaining} days remaining"
        )
    return position


async def run_accrual_batch(
    session_factory: async_sessionmaker = AsyncSessionLocal,
    run_date: date | None = None,
) -> AccrualReport:
    """
    Pay one day of profit on every due position.

    Args:
        session_factory: Opens the selection session and one session per
            position, so each position commits or rolls back on its own.
        run_date: The business date being paid; defaults to today (UTC).

    Returns:
        AccrualReport with processed/completed/skipped counts and failures.
    """
    run_date = run_date or utc_today()
    report = AccrualReport(run_date=run_date)

    async with session_factory() as db:
        due_ids = [position.id for position in await find_due_positions(db, run_date)]

    logger.info(f"Accrual run for {run_date} started: {len(due_ids)} positions due")

    for position_id in due_ids:
        try:
            async with session_factory() as db:
                position = await accrue_position(db, position_id, run_date)
        except Exception as exc:
            logger.error(
                f"Accrual failed for position {position_id} on {run_date}: {exc}",
                exc_info=True,
            )
            report.failures.append(AccrualFailure(position_id=position_id, error=str(exc)))
            continue

        if position is None:
            report.skipped += 1
            continue

        report.processed += 1
        if position.status == PositionStatus.COMPLETED:
            report.completed += 1

    logger.info(
        f"Accrual run for {run_date} finished: {report.processed} processed, "
        f"{report.completed} completed, {report.skipped} skipped, "
        f"{len(report.failures)} failed"
    )
    return report
