"""
Withdrawals router: filing and tracking payout requests.

Member endpoints:
  POST /withdrawals                  File a request (funds are held at once)
  GET  /withdrawals/{request_id}     Track one of your own requests

Approval and rejection are admin actions, see routers/admin.py.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.database import get_db
from yieldwallet.dependencies import get_current_user_id
from yieldwallet.schemas.withdrawal import (
    WithdrawalActionResponse,
    WithdrawalCreateRequest,
    WithdrawalResponse,
)
from yieldwallet.services import withdrawal_service

router = APIRouter()


@router.post(
    "",
    response_model=WithdrawalActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a withdrawal",
)
async def request_withdrawal(
    request: WithdrawalCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    File a withdrawal request to the given bank account.

    The amount is debited from the wallet immediately and stays held while
    the request is pending. A rejected request is refunded in full.
    """
    withdrawal, new_balance = await withdrawal_service.request_withdrawal(
        db,
        user_id=user_id,
        amount_cents=request.amount_cents,
        bank_name=request.bank_name,
        account_number=request.account_number,
        account_name=request.account_name,
    )
    return {
        "message": "Withdrawal request submitted successfully. Awaiting admin approval.",
        "withdrawal": withdrawal,
        "new_balance_cents": new_balance,
    }


@router.get(
    "/{request_id}",
    response_model=WithdrawalResponse,
    summary="Get one of your withdrawal requests",
)
async def get_withdrawal(
    request_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await withdrawal_service.get_withdrawal_request(db, request_id, user_id=user_id)
