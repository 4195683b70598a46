"""
Recharges router: members report an incoming payment for admin confirmation.

Member endpoints:
  POST /recharges    Record a pending recharge

The wallet is only credited when an admin approves the entry
(POST /admin/recharges/{transaction_id}/approve).
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.database import get_db
from yieldwallet.dependencies import get_current_user_id
from yieldwallet.schemas.transaction import RechargeRequest, RechargeResponse
from yieldwallet.services import recharge_service

router = APIRouter()


@router.post(
    "",
    response_model=RechargeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a wallet recharge",
)
async def request_recharge(
    request: RechargeRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    txn = await recharge_service.request_recharge(db, user_id, request.amount_cents)
    return {
        "message": "Payment request submitted successfully. Awaiting admin approval.",
        "transaction": txn,
    }
