"""
Recharge service: wallet top-ups paid outside the platform.

A user pays by bank transfer and files a recharge request. The request is a
pending "recharge" entry in the transaction log; nothing is credited until
an admin has matched it against the incoming payment.

  request_recharge()  pending entry, balance unchanged
  approve_recharge()  entry completed + wallet credited (one atomic unit)
  reject_recharge()   entry cancelled with the reason appended
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.database import atomic
from yieldwallet.exceptions import InputValidationError, InvalidStateError
from yieldwallet.models.transaction import Transaction, TransactionStatus, TransactionType
from yieldwallet.services import transaction_service, wallet_service

logger = logging.getLogger(__name__)


async def request_recharge(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
) -> Transaction:
    """
    Record a pending recharge for admin confirmation.

    Raises:
        InputValidationError: If the amount is not positive.
        WalletNotFoundError: If the user has no wallet.
    """
    if amount_cents <= 0:
        raise InputValidationError("Please enter a valid amount")

    async with atomic(db):
        await wallet_service.get_wallet(db, user_id)
        txn = await transaction_service.append(
            db,
            user_id=user_id,
            txn_type=TransactionType.RECHARGE,
            amount_cents=amount_cents,
            description="Online payment request",
            status=TransactionStatus.PENDING,
        )

    logger.info(f"Recharge request {txn.id}: user {user_id}, {amount_cents}")
    return txn


async def approve_recharge(
    db: AsyncSession,
    transaction_id: uuid.UUID,
) -> tuple[Transaction, int]:
    """
    Confirm a recharge: complete the entry and credit the wallet.

    Returns:
        Tuple of (completed entry, new wallet balance).

    Raises:
        TransactionNotFoundError: If the entry does not exist.
        InvalidStateError: If it is not a pending recharge.
    """
    async with atomic(db):
        await _require_recharge(db, transaction_id)
        txn = await transaction_service.finalize(
            db, transaction_id, TransactionStatus.COMPLETED
        )
        new_balance = await wallet_service.adjust_balance(
            db, txn.user_id, txn.amount_cents
        )

    logger.info(
        f"Recharge {transaction_id} approved: {txn.amount_cents} credited to "
        f"user {txn.user_id}, balance {new_balance}"
    )
    return txn, new_balance


async def reject_recharge(
    db: AsyncSession,
    transaction_id: uuid.UUID,
    admin_notes: str | None = None,
) -> Transaction:
    """
    Decline a recharge; the wallet is not touched.

    Raises:
        TransactionNotFoundError: If the entry does not exist.
        InvalidStateError: If it is not a pending recharge.
    """
    admin_notes = admin_notes or "Payment not received"

    async with atomic(db):
        await _require_recharge(db, transaction_id)
        txn = await transaction_service.finalize(
            db, transaction_id, TransactionStatus.CANCELLED, note=admin_notes
        )

    logger.info(f"Recharge {transaction_id} rejected: {admin_notes}")
    return txn


async def _require_recharge(db: AsyncSession, transaction_id: uuid.UUID) -> None:
    txn = await transaction_service.get_transaction(db, transaction_id)
    if txn.type != TransactionType.RECHARGE:
        raise InvalidStateError(f"Transaction {transaction_id} is not a recharge")
