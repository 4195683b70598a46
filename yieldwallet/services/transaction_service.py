"""
Transaction service: the append-only transaction log.

Every balance change in the system is paired with exactly one entry written
here, inside the same atomic() unit as the change. Entries are never
deleted or edited, except for the single pending -> completed / cancelled
status transition made by the withdrawal and recharge workflows.

Finalizing is a conditional UPDATE (... WHERE status = 'pending'), so two
admins racing to settle the same entry cannot both succeed: the loser
matches no row and gets InvalidStateError.

Reconciliation:
  compute_balance_from_log() recomputes a wallet balance from the log.
  wallet_service.get_balance() compares it with the cached balance; any
  difference signals a data integrity issue.
"""

import uuid

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.exceptions import InvalidStateError, TransactionNotFoundError
from yieldwallet.models.transaction import (
    CREDIT_TYPES,
    DEBIT_TYPES,
    Transaction,
    TransactionStatus,
    TransactionType,
)


async def append(
    db: AsyncSession,
    user_id: uuid.UUID,
    txn_type: TransactionType,
    amount_cents: int,
    description: str | None = None,
    status: TransactionStatus = TransactionStatus.COMPLETED,
) -> Transaction:
    """
    Append one entry to the log.

    Must run inside the caller's atomic() unit; a storage failure here rolls
    back the whole operation.
    """
    txn = Transaction(
        user_id=user_id,
        type=txn_type,
        amount_cents=amount_cents,
        description=description,
        status=status,
    )
    db.add(txn)
    await db.flush()
    return txn


async def finalize(
    db: AsyncSession,
    transaction_id: uuid.UUID,
    status: TransactionStatus,
    note: str | None = None,
) -> Transaction:
    """
    Move a pending entry to its terminal status.

    Args:
        db: Database session (inside an atomic() unit).
        transaction_id: The pending entry.
        status: COMPLETED or CANCELLED.
        note: When given, " (Rejected: <note>)" is appended to the description.

    Raises:
        TransactionNotFoundError: If the entry does not exist.
        InvalidStateError: If the entry is no longer pending.
    """
    values = {"status": status}
    if note is not None:
        values["description"] = (
            func.coalesce(Transaction.description, "") + f" (Rejected: {note})"
        )

    result = await db.execute(
        update(Transaction)
        .where(Transaction.id == transaction_id)
        .where(Transaction.status == TransactionStatus.PENDING)
        .values(**values)
        .returning(Transaction)
    )
    txn = result.scalar_one_or_none()

    if txn is None:
        existing = await db.get(Transaction, transaction_id)
        if existing is None:
            raise TransactionNotFoundError(transaction_id)
        raise InvalidStateError(
            f"Transaction {transaction_id} is already {existing.status}"
        )

    return txn


async def find_latest_pending(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
    txn_type: TransactionType,
) -> Transaction | None:
    """
    Find the most recent pending entry matching user, amount and type.

    This is a best-effort pairing: with several pending entries of the same
    amount it picks the newest. Withdrawal requests carry an explicit
    transaction_id and only fall back to this lookup when it is missing.
    """
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .where(Transaction.amount_cents == amount_cents)
        .where(Transaction.type == txn_type)
        .where(Transaction.status == TransactionStatus.PENDING)
        .order_by(Transaction.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_transaction(
    db: AsyncSession,
    transaction_id: uuid.UUID,
) -> Transaction:
    """
    Raises:
        TransactionNotFoundError: If the entry does not exist.
    """
    txn = await db.get(Transaction, transaction_id)
    if txn is None:
        raise TransactionNotFoundError(transaction_id)
    return txn


async def list_transactions(
    db: AsyncSession,
    user_id: uuid.UUID,
    status_filter: str | None = None,
    type_filter: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List a user's log entries, newest first, with optional filters.

    Args:
        db: Database session.
        user_id: The wallet owner (always the authenticated caller).
        status_filter: Optional filter by status ("pending", "completed", "cancelled").
        type_filter: Optional filter by type ("profit", "withdrawal", ...).
        limit: Max number of results (default 50).
        offset: Number of results to skip (for pagination).
    """
    query = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )

    if status_filter:
        query = query.where(Transaction.status == status_filter)
    if type_filter:
        query = query.where(Transaction.type == type_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def compute_balance_from_log(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> int:
    """
    Recompute a wallet balance from the log.

    Completed credits add, completed debits subtract, and pending
    withdrawals subtract too: their funds left the wallet when the request
    was filed. Pending recharges add nothing until approved.
    """
    async def _sum(types, status) -> int:
        result = await db.execute(
            select(func.coalesce(func.sum(Transaction.amount_cents), 0))
            .where(Transaction.user_id == user_id)
            .where(Transaction.type.in_(types))
            .where(Transaction.status == status)
        )
        return result.scalar()

    total_credits = await _sum(CREDIT_TYPES, TransactionStatus.COMPLETED)
    total_debits = await _sum(DEBIT_TYPES, TransactionStatus.COMPLETED)
    total_held = await _sum((TransactionType.WITHDRAWAL,), TransactionStatus.PENDING)

    return total_credits - total_debits - total_held
