"""
Wallet router: the caller's own wallet.

Member endpoints (require JWT, scoped to the authenticated user):
  POST /wallet                   Open the wallet (idempotent)
  GET  /wallet                   Balance, with reconciliation against the log
  GET  /wallet/transactions      Own transaction log, newest first
  POST /wallet/checkin-bonus     Claim the daily check-in bonus

The user is always taken from the token. There is no way to name another
user's wallet on these routes; admins use /admin/wallets/{user_id}.
"""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.config import settings
from yieldwallet.database import get_db
from yieldwallet.dependencies import get_current_user_id
from yieldwallet.schemas.transaction import TransactionResponse
from yieldwallet.schemas.wallet import (
    BalanceResponse,
    LedgerUpdateResponse,
    WalletOpenResponse,
)
from yieldwallet.services import transaction_service, wallet_service

router = APIRouter()


@router.post(
    "",
    response_model=WalletOpenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open your wallet",
)
async def open_wallet(
    response: Response,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Open a zero-balance wallet for the authenticated user.

    Calling this again is harmless: the existing wallet is returned with
    200 instead of 201.
    """
    wallet, created = await wallet_service.create_wallet(db, user_id)
    if not created:
        response.status_code = status.HTTP_200_OK

    return {
        "message": "Wallet opened" if created else "Wallet already open",
        "wallet": wallet,
    }


@router.get(
    "",
    response_model=BalanceResponse,
    summary="Get your wallet balance",
)
async def get_balance(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Return the cached balance and the balance recomputed from the log.

    `match` is false only if the ledger is inconsistent.
    """
    return await wallet_service.get_balance(db, user_id)


@router.get(
    "/transactions",
    response_model=list[TransactionResponse],
    summary="List your transactions",
)
async def list_transactions(
    status: str | None = Query(None, description="Filter by status: pending, completed, cancelled"),
    type: str | None = Query(None, description="Filter by type: profit, withdrawal, plan_purchase, ..."),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List your transaction log entries, newest first."""
    return await transaction_service.list_transactions(
        db=db,
        user_id=user_id,
        status_filter=status,
        type_filter=type,
        limit=limit,
        offset=offset,
    )


@router.post(
    "/checkin-bonus",
    response_model=LedgerUpdateResponse,
    summary="Claim the daily check-in bonus",
)
async def claim_checkin_bonus(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Credit the fixed daily bonus. Can be claimed once per calendar day (UTC);
    a second claim the same day is refused with 409 `already_claimed`.
    """
    txn, new_balance = await wallet_service.claim_checkin_bonus(db, user_id)
    amount = settings.CHECKIN_BONUS_CENTS / 100
    return {
        "message": f"{settings.CURRENCY} {amount:,.2f} daily bonus claimed successfully!",
        "new_balance_cents": new_balance,
        "transaction": txn,
    }
