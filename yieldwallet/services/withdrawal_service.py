"""
Withdrawal service: the manual payout approval workflow.

State machine (see models/withdrawal.py):

    pending ──approve──> approved
       └────reject────> rejected

request_withdrawal()
    Holds the funds immediately: conditional debit, a pending "withdrawal"
    log entry, and the request pointing at that entry. One atomic() unit.

approve_withdrawal()
    Marks the request approved and completes the paired entry. The wallet
    is not touched; the money already left it at request time.

reject_withdrawal()
    Marks the request rejected, refunds the held amount and cancels the
    paired entry with the reason appended. This is the compensating action
    for the hold: debit + refund nets to zero.

Both admin transitions start with a conditional
UPDATE ... WHERE status = 'pending', so a request can be settled exactly
once even when two admins click at the same moment.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.database import atomic
from yieldwallet.exceptions import (
    InputValidationError,
    InvalidStateError,
    TransactionNotFoundError,
    WithdrawalRequestNotFoundError,
)
from yieldwallet.models.transaction import TransactionStatus, TransactionType
from yieldwallet.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from yieldwallet.services import transaction_service, wallet_service

logger = logging.getLogger(__name__)


async def request_withdrawal(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
    bank_name: str,
    account_number: str,
    account_name: str,
) -> tuple[WithdrawalRequest, int]:
    """
    File a withdrawal request and hold the funds.

    Args:
        db: Database session.
        user_id: The requesting user (the authenticated caller).
        amount_cents: Positive amount in minor units.
        bank_name, account_number, account_name: Destination; all required.

    Returns:
        Tuple of (pending request, new wallet balance).

    Raises:
        InputValidationError: Non-positive amount or a blank bank field.
        WalletNotFoundError: If the user has no wallet.
        InsufficientBalanceError: If the balance does not cover the amount.
    """
    if amount_cents <= 0:
        raise InputValidationError("Please enter a valid amount")

    bank_name = (bank_name or "").strip()
    account_number = (account_number or "").strip()
    account_name = (account_name or "").strip()
    if not (bank_name and account_number and account_name):
        raise InputValidationError("All bank details are required")

    async with atomic(db):
        new_balance = await wallet_service.adjust_balance(db, user_id, -amount_cents)

        txn = await transaction_service.append(
            db,
            user_id=user_id,
            txn_type=TransactionType.WITHDRAWAL,
            amount_cents=amount_cents,
            description=f"Withdrawal request to {bank_name}",
            status=TransactionStatus.PENDING,
        )

        withdrawal = WithdrawalRequest(
            user_id=user_id,
            amount_cents=amount_cents,
            bank_name=bank_name,
            account_number=account_number,
            account_name=account_name,
            status=WithdrawalStatus.PENDING,
            transaction_id=txn.id,
        )
        db.add(withdrawal)
        await db.flush()

    logger.info(
        f"Withdrawal request {withdrawal.id}: user {user_id} holds {amount_cents}, "
        f"balance {new_balance}"
    )
    return withdrawal, new_balance


async def approve_withdrawal(
    db: AsyncSession,
    request_id: uuid.UUID,
    admin_notes: str | None = None,
) -> WithdrawalRequest:
    """
    Approve a pending request and complete its log entry.

    Raises:
        WithdrawalRequestNotFoundError: If the request does not exist.
        InvalidStateError: If the request is not pending.
    """
    async with atomic(db):
        withdrawal = await _settle(
            db, request_id, WithdrawalStatus.APPROVED, admin_notes or "Approved by admin"
        )
        await _finalize_paired_entry(db, withdrawal, TransactionStatus.COMPLETED)

    logger.info(
        f"Withdrawal request {request_id} approved: {withdrawal.amount_cents} "
        f"paid out to user {withdrawal.user_id}"
    )
    return withdrawal


async def reject_withdrawal(
    db: AsyncSession,
    request_id: uuid.UUID,
    admin_notes: str | None = None,
) -> tuple[WithdrawalRequest, int]:
    """
    Reject a pending request, refund the hold and cancel its log entry.

    Returns:
        Tuple of (rejected request, new wallet balance).

    Raises:
        WithdrawalRequestNotFoundError: If the request does not exist.
        InvalidStateError: If the request is not pending.
    """
    admin_notes = admin_notes or "Rejected by admin"

    async with atomic(db):
        withdrawal = await _settle(db, request_id, WithdrawalStatus.REJECTED, admin_notes)
        new_balance = await wallet_service.adjust_balance(
            db, withdrawal.user_id, withdrawal.amount_cents
        )
        await _finalize_paired_entry(
            db, withdrawal, TransactionStatus.CANCELLED, note=admin_notes
        )

    logger.info(
        f"Withdrawal request {request_id} rejected: {withdrawal.amount_cents} "
        f"refunded to user {withdrawal.user_id}, balance {new_balance}"
    )
    return withdrawal, new_balance


async def get_withdrawal_request(
    db: AsyncSession,
    request_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
) -> WithdrawalRequest:
    """
    Get a request by ID.

    When `user_id` is given the request must belong to that user; someone
    else's request is reported as not found.

    Raises:
        WithdrawalRequestNotFoundError: If the request is missing or not owned.
    """
    withdrawal = await db.get(WithdrawalRequest, request_id)

    if withdrawal is None or (user_id is not None and withdrawal.user_id != user_id):
        raise WithdrawalRequestNotFoundError(request_id)

    return withdrawal


async def list_withdrawal_requests(
    db: AsyncSession,
    status_filter: WithdrawalStatus | None = WithdrawalStatus.PENDING,
    limit: int = 50,
    offset: int = 0,
) -> list[WithdrawalRequest]:
    """
    The admin review queue: requests across all users, oldest first.

    Defaults to pending requests; pass status_filter=None for every status.
    """
    query = (
        select(WithdrawalRequest)
        .order_by(WithdrawalRequest.request_date.asc())
        .limit(limit)
        .offset(offset)
    )
    if status_filter:
        query = query.where(WithdrawalRequest.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def _settle(
    db: AsyncSession,
    request_id: uuid.UUID,
    status: WithdrawalStatus,
    admin_notes: str,
) -> WithdrawalRequest:
    """Flip a pending request to `status`; exactly one caller can win."""
    result = await db.execute(
        update(WithdrawalRequest)
        .where(WithdrawalRequest.id == request_id)
        .where(WithdrawalRequest.status == WithdrawalStatus.PENDING)
        .values(
            status=status,
            admin_notes=admin_notes,
            processed_date=datetime.now(timezone.utc),
        )
        .returning(WithdrawalRequest)
    )
    withdrawal = result.scalar_one_or_none()

    if withdrawal is None:
        existing = await db.get(WithdrawalRequest, request_id)
        if existing is None:
            raise WithdrawalRequestNotFoundError(request_id)
        raise InvalidStateError("This withdrawal request is not pending")

    return withdrawal


async def _finalize_paired_entry(
    db: AsyncSession,
    withdrawal: WithdrawalRequest,
    status: TransactionStatus,
    note: str | None = None,
) -> None:
    """
    Finalize the log entry paired with a request.

    Uses the request's transaction_id; rows without one fall back to the
    newest pending withdrawal entry of the same user and amount.
    """
    transaction_id = withdrawal.transaction_id

    if transaction_id is None:
        txn = await transaction_service.find_latest_pending(
            db, withdrawal.user_id, withdrawal.amount_cents, TransactionType.WITHDRAWAL
        )
        if txn is None:
            raise InvalidStateError(
                f"No pending withdrawal entry found for request {withdrawal.id}"
            )
        logger.warning(
            f"Withdrawal request {withdrawal.id} has no transaction link, "
            f"paired with latest pending entry {txn.id}"
        )
        transaction_id = txn.id

    try:
        await transaction_service.finalize(db, transaction_id, status, note=note)
    except TransactionNotFoundError:
        raise InvalidStateError(
            f"Paired entry {transaction_id} of request {withdrawal.id} is missing"
        )
