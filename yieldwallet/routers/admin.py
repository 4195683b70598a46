"""
Admin router: back-office actions that move money on a member's behalf.

All endpoints require the admin claim on the token.

Endpoints:
  POST /admin/wallets/{user_id}/credit                   Manual credit
  GET  /admin/wallets/{user_id}                          Any wallet's balance
  GET  /admin/withdrawals?status=pending                 Review queue
  POST /admin/withdrawals/{request_id}/approve           Pay out a withdrawal
  POST /admin/withdrawals/{request_id}/reject            Refund a withdrawal
  POST /admin/recharges/{transaction_id}/approve         Confirm a recharge
  POST /admin/recharges/{transaction_id}/reject          Decline a recharge
  POST /admin/accrual/run                                Run the accrual batch

Keeping every admin route in one router avoids ordering conflicts between
routers that share a prefix.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from yieldwallet.database import get_db, get_session_factory
from yieldwallet.dependencies import require_admin
from yieldwallet.models.withdrawal import WithdrawalStatus
from yieldwallet.schemas.accrual import AccrualReportResponse, AccrualRunRequest
from yieldwallet.schemas.transaction import AdminNotesRequest, RechargeResponse
from yieldwallet.schemas.wallet import (
    AdminCreditRequest,
    BalanceResponse,
    LedgerUpdateResponse,
)
from yieldwallet.schemas.withdrawal import WithdrawalActionResponse, WithdrawalResponse
from yieldwallet.services import (
    accrual_service,
    recharge_service,
    wallet_service,
    withdrawal_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Wallet admin endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/wallets/{user_id}/credit",
    response_model=LedgerUpdateResponse,
    summary="[Admin] Credit a wallet",
)
async def admin_credit_wallet(
    user_id: uuid.UUID,
    request: AdminCreditRequest,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Add funds to a member's wallet, recorded as a completed admin_credit
    entry. The member's wallet must already be open.
    """
    txn, new_balance = await wallet_service.credit_wallet_admin(
        db, user_id, request.amount_cents, request.description
    )
    logger.info(f"Admin {admin_id} credited {request.amount_cents} to user {user_id}")
    return {
        "message": "Wallet credited successfully",
        "new_balance_cents": new_balance,
        "transaction": txn,
    }


@router.get(
    "/wallets/{user_id}",
    response_model=BalanceResponse,
    summary="[Admin] Get any wallet's balance",
)
async def admin_get_wallet(
    user_id: uuid.UUID,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Get any member's balance, with reconciliation against the log."""
    return await wallet_service.get_balance(db, user_id)


# ---------------------------------------------------------------------------
# Withdrawal admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/withdrawals",
    response_model=list[WithdrawalResponse],
    summary="[Admin] List withdrawal requests",
)
async def admin_list_withdrawals(
    status: WithdrawalStatus = Query(WithdrawalStatus.PENDING, description="pending, approved or rejected"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """The review queue across all members, oldest request first."""
    return await withdrawal_service.list_withdrawal_requests(
        db, status_filter=status, limit=limit, offset=offset
    )


@router.post(
    "/withdrawals/{request_id}/approve",
    response_model=WithdrawalActionResponse,
    summary="[Admin] Approve a withdrawal",
)
async def admin_approve_withdrawal(
    request_id: uuid.UUID,
    request: AdminNotesRequest | None = None,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Mark a pending withdrawal as paid out. The funds were held when the
    request was filed, so the balance does not change.
    """
    notes = request.admin_notes if request else None
    withdrawal = await withdrawal_service.approve_withdrawal(db, request_id, notes)
    logger.info(f"Admin {admin_id} approved withdrawal {request_id}")
    return {
        "message": "Withdrawal approved successfully",
        "withdrawal": withdrawal,
    }


@router.post(
    "/withdrawals/{request_id}/reject",
    response_model=WithdrawalActionResponse,
    summary="[Admin] Reject a withdrawal",
)
async def admin_reject_withdrawal(
    request_id: uuid.UUID,
    request: AdminNotesRequest | None = None,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending withdrawal and refund the held amount to the wallet."""
    notes = request.admin_notes if request else None
    withdrawal, new_balance = await withdrawal_service.reject_withdrawal(
        db, request_id, notes
    )
    logger.info(f"Admin {admin_id} rejected withdrawal {request_id}")
    return {
        "message": "Withdrawal rejected and amount refunded to user",
        "withdrawal": withdrawal,
        "new_balance_cents": new_balance,
    }


# ---------------------------------------------------------------------------
# Recharge admin endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/recharges/{transaction_id}/approve",
    response_model=LedgerUpdateResponse,
    summary="[Admin] Confirm a recharge",
)
async def admin_approve_recharge(
    transaction_id: uuid.UUID,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    txn, new_balance = await recharge_service.approve_recharge(db, transaction_id)
    logger.info(f"Admin {admin_id} approved recharge {transaction_id}")
    return {
        "message": "Recharge approved and wallet credited",
        "new_balance_cents": new_balance,
        "transaction": txn,
    }


@router.post(
    "/recharges/{transaction_id}/reject",
    response_model=RechargeResponse,
    summary="[Admin] Decline a recharge",
)
async def admin_reject_recharge(
    transaction_id: uuid.UUID,
    request: AdminNotesRequest | None = None,
    admin_id: uuid.UUID = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    notes = request.admin_notes if request else None
    txn = await recharge_service.reject_recharge(db, transaction_id, notes)
    logger.info(f"Admin {admin_id} rejected recharge {transaction_id}")
    return {
        "message": "Recharge rejected",
        "transaction": txn,
    }


# ---------------------------------------------------------------------------
# Accrual
# ---------------------------------------------------------------------------

@router.post(
    "/accrual/run",
    response_model=AccrualReportResponse,
    summary="[Admin] Run the daily accrual batch",
)
async def admin_run_accrual(
    request: AccrualRunRequest | None = None,
    admin_id: uuid.UUID = Depends(require_admin),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Pay one day of profit on every due position for `run_date` (default
    today, UTC). Safe to repeat: positions already paid for that date are
    not paid again.
    """
    run_date = request.run_date if request else None
    report = await accrual_service.run_accrual_batch(session_factory, run_date)
    logger.info(f"Admin {admin_id} ran accrual for {report.run_date}")
    return {
        "message": f"Accrual for {report.run_date} finished",
        "run_date": report.run_date,
        "processed": report.processed,
        "completed": report.completed,
        "skipped": report.skipped,
        "failures": report.failures,
    }
