"""
Wallet service: the ledger store and the two credit-only flows on it.

This module handles:
  - Opening a wallet for a user the identity service already knows
  - adjust_balance(), the only code path that writes balance_cents
  - Balance reconciliation (cached vs. recomputed from the log)
  - Admin manual credit
  - The daily check-in bonus

Conditional updates:
  A balance check and the debit it guards are ONE statement:

      UPDATE wallets SET balance_cents = balance_cents - :x
       WHERE user_id = :u AND balance_cents >= :x
      RETURNING balance_cents

  Two concurrent debits therefore cannot both pass a stale "sufficient
  balance" read. When no row comes back nothing was changed, and a
  follow-up read tells "no wallet" apart from "not enough money". The
  check-in bonus uses the same shape keyed on last_checkin_date.

adjust_balance() never commits. It must run inside the atomic() unit that
also appends the matching transaction log entry.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.clock import utc_today
from yieldwallet.config import settings
from yieldwallet.database import atomic
from yieldwallet.exceptions import (
    AlreadyClaimedError,
    ConflictError,
    InputValidationError,
    InsufficientBalanceError,
    WalletNotFoundError,
)
from yieldwallet.models.transaction import Transaction, TransactionType
from yieldwallet.models.wallet import Wallet
from yieldwallet.services import transaction_service

logger = logging.getLogger(__name__)


async def create_wallet(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> tuple[Wallet, bool]:
    """
    Open a wallet for a user, or return the one already open.

    Concurrent opens for the same user all succeed: the losing inserts hit
    the primary key, roll back, and return the winner's wallet.

    Returns:
        Tuple of (wallet, created). `created` is False when the wallet
        already existed.
    """
    try:
        async with atomic(db):
            wallet = await db.get(Wallet, user_id)
            if wallet is not None:
                return wallet, False

            wallet = Wallet(user_id=user_id, balance_cents=0)
            db.add(wallet)
            try:
                await db.flush()
            except IntegrityError as exc:
                raise ConflictError() from exc
    except ConflictError:
        result = await db.execute(
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        wallet = result.scalar_one_or_none()
        if wallet is None:
            raise
        logger.info(f"Wallet for user {user_id} was opened by a concurrent request")
        return wallet, False

    logger.info(f"Opened wallet for user {user_id}")
    return wallet, True


async def get_wallet(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> Wallet:
    """
    Raises:
        WalletNotFoundError: If the user has no wallet.
    """
    result = await db.execute(
        select(Wallet)
        .where(Wallet.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    wallet = result.scalar_one_or_none()

    if wallet is None:
        raise WalletNotFoundError(user_id)

    return wallet


async def adjust_balance(
    db: AsyncSession,
    user_id: uuid.UUID,
    signed_amount_cents: int,
) -> int:
    """
    Apply a signed change to a wallet balance and return the new balance.

    Positive amounts credit, negative amounts debit. A debit only applies
    when the balance covers it; the check and the write are one statement.

    Raises:
        WalletNotFoundError: If the user has no wallet.
        InsufficientBalanceError: If a debit exceeds the balance. Nothing
            has been written when this is raised.
    """
    statement = (
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(balance_cents=Wallet.balance_cents + signed_amount_cents)
        .returning(Wallet.balance_cents)
    )
    if signed_amount_cents < 0:
        statement = statement.where(Wallet.balance_cents >= -signed_amount_cents)

    result = await db.execute(statement)
    new_balance = result.scalar_one_or_none()

    if new_balance is None:
        wallet = await get_wallet(db, user_id)
        raise InsufficientBalanceError(
            user_id=user_id,
            requested_cents=-signed_amount_cents,
            available_cents=wallet.balance_cents,
        )

    return new_balance


async def get_balance(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> dict:
    """
    Get the wallet balance, both cached and recomputed from the log.

    A mismatch between the two means some balance change was written
    without its log entry (or the reverse).

    Returns:
        Dict with user_id, balance_cents, computed_balance_cents, match,
        last_checkin_date and currency.
    """
    wallet = await get_wallet(db, user_id)
    computed_balance_cents = await transaction_service.compute_balance_from_log(
        db, user_id
    )

    return {
        "user_id": wallet.user_id,
        "balance_cents": wallet.balance_cents,
        "computed_balance_cents": computed_balance_cents,
        "match": wallet.balance_cents == computed_balance_cents,
        "last_checkin_date": wallet.last_checkin_date,
        "currency": settings.CURRENCY,
    }


async def credit_wallet_admin(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
) -> tuple[Transaction, int]:
    """
    Credit a user's wallet manually (admin operation).

    Args:
        db: Database session.
        user_id: The wallet to credit.
        amount_cents: Positive amount in minor units.
        description: Memo for the log entry; defaults to "Admin manual credit".

    Returns:
        Tuple of (admin_credit transaction, new balance).

    Raises:
        InputValidationError: If the amount is not positive.
        WalletNotFoundError: If the user has no wallet.
    """
    if amount_cents <= 0:
        raise InputValidationError("Please enter a valid amount to credit")

    async with atomic(db):
        new_balance = await adjust_balance(db, user_id, amount_cents)
        txn = await transaction_service.append(
            db,
            user_id=user_id,
            txn_type=TransactionType.ADMIN_CREDIT,
            amount_cents=amount_cents,
            description=description or "Admin manual credit",
        )

    logger.info(f"Admin credit of {amount_cents} to user {user_id}, balance {new_balance}")
    return txn, new_balance


async def claim_checkin_bonus(
    db: AsyncSession,
    user_id: uuid.UUID,
    today: date | None = None,
) -> tuple[Transaction, int]:
    """
    Pay the daily check-in bonus, at most once per calendar day.

    The date check, the credit and the last_checkin_date write are a single
    conditional UPDATE, so two simultaneous claims pay once.

    Returns:
        Tuple of (checkin_bonus transaction, new balance).

    Raises:
        WalletNotFoundError: If the user has no wallet.
        AlreadyClaimedError: If the bonus was already claimed today.
    """
    today = today or utc_today()
    bonus_cents = settings.CHECKIN_BONUS_CENTS

    async with atomic(db):
        result = await db.execute(
            update(Wallet)
            .where(Wallet.user_id == user_id)
            .where(
                or_(
                    Wallet.last_checkin_date.is_(None),
                    Wallet.last_checkin_date < today,
                )
            )
            .values(
                balance_cents=Wallet.balance_cents + bonus_cents,
                last_checkin_date=today,
            )
            .returning(Wallet.balance_cents)
        )
        new_balance = result.scalar_one_or_none()

        if new_balance is None:
            await get_wallet(db, user_id)
            raise AlreadyClaimedError()

        txn = await transaction_service.append(
            db,
            user_id=user_id,
            txn_type=TransactionType.CHECKIN_BONUS,
            amount_cents=bonus_cents,
            description="Daily check-in bonus",
        )

    logger.info(f"Check-in bonus of {bonus_cents} paid to user {user_id} for {today}")
    return txn, new_balance
