"""
Investment service: plan purchase and the position registry.

purchase_plan() is one atomic() unit made of three writes:
  1. conditional debit of the plan price from the wallet
  2. a completed "plan_purchase" entry in the transaction log
  3. a new InvestmentPosition snapshotting price and daily profit

All three commit together or not at all. The plan lookup runs first, so
a missing or retired plan fails before anything is written.

Positions are only advanced by the accrual engine (accrual_service.py);
this module never changes one after creating it.
"""

import logging
import uuid
from datetime import date, timedelta

from sqlalchemy import select, case
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.clock import utc_today
from yieldwallet.database import atomic
from yieldwallet.exceptions import PositionNotFoundError
from yieldwallet.models.position import InvestmentPosition, PositionStatus
from yieldwallet.models.transaction import TransactionType
from yieldwallet.services import plan_service, transaction_service, wallet_service

logger = logging.getLogger(__name__)


async def purchase_plan(
    db: AsyncSession,
    user_id: uuid.UUID,
    plan_id: int,
    today: date | None = None,
) -> tuple[InvestmentPosition, int]:
    """
    Buy a plan with wallet funds.

    Args:
        db: Database session.
        user_id: The buyer (the authenticated caller).
        plan_id: The plan to buy.
        today: Purchase date; defaults to the current UTC date.

    Returns:
        Tuple of (new position, new wallet balance).

    Raises:
        PlanNotFoundError / PlanInactiveError: If the plan cannot be bought.
        WalletNotFoundError: If the user has no wallet.
        InsufficientBalanceError: If the balance does not cover the price.
    """
    today = today or utc_today()

    async with atomic(db):
        plan = await plan_service.get_active_plan(db, plan_id)

        new_balance = await wallet_service.adjust_balance(
            db, user_id, -plan.price_cents
        )
        await transaction_service.append(
            db,
            user_id=user_id,
            txn_type=TransactionType.PLAN_PURCHASE,
            amount_cents=plan.price_cents,
            description=f"Purchase of {plan.name}",
        )

        position = InvestmentPosition(
            user_id=user_id,
            plan_id=plan.id,
            purchase_price_cents=plan.price_cents,
            daily_profit_cents=plan.daily_profit_cents,
            start_date=today,
            end_date=today + timedelta(days=plan.duration_days),
            days_remaining=plan.duration_days,
            total_profit_earned_cents=0,
            status=PositionStatus.ACTIVE,
            last_accrual_date=None,
        )
        db.add(position)
        await db.flush()

    logger.info(
        f"User {user_id} bought plan {plan.id} ({plan.name}) for "
        f"{plan.price_cents}, position {position.id}, balance {new_balance}"
    )
    return position, new_balance


async def list_positions(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[InvestmentPosition]:
    """A user's positions, active ones first, newest first within each group."""
    active_first = case(
        (InvestmentPosition.status == PositionStatus.ACTIVE, 0),
        else_=1,
    )
    result = await db.execute(
        select(InvestmentPosition)
        .where(InvestmentPosition.user_id == user_id)
        .order_by(active_first, InvestmentPosition.start_date.desc())
    )
    return list(result.scalars().all())


async def get_position(
    db: AsyncSession,
    user_id: uuid.UUID,
    position_id: uuid.UUID,
) -> InvestmentPosition:
    """
    Get one of the caller's positions.

    A position owned by someone else is reported as not found, so IDs
    cannot be probed.

    Raises:
        PositionNotFoundError: If the position does not exist or is not
            owned by `user_id`.
    """
    position = await db.get(InvestmentPosition, position_id)

    if position is None or position.user_id != user_id:
        raise PositionNotFoundError(position_id)

    return position
