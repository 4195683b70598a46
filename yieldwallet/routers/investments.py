"""
Investments router: plan catalog (read-only) and the caller's positions.

Member endpoints:
  GET  /plans                        Plans currently on offer
  POST /investments                  Buy a plan from the wallet
  GET  /investments                  Own positions, active first
  GET  /investments/{position_id}    One own position
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from yieldwallet.database import get_db
from yieldwallet.dependencies import get_current_user_id
from yieldwallet.schemas.investment import (
    PlanResponse,
    PositionResponse,
    PurchaseRequest,
    PurchaseResponse,
)
from yieldwallet.services import investment_service, plan_service

router = APIRouter()


@router.get(
    "/plans",
    response_model=list[PlanResponse],
    summary="List plans on offer",
)
async def list_plans(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await plan_service.list_active_plans(db)


@router.post(
    "/investments",
    response_model=PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Buy an investment plan",
)
async def purchase_plan(
    request: PurchaseRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Buy a plan. The price is debited from the wallet and a position starts
    accruing the plan's daily profit from the next batch run.

    Rejected with 422 `insufficient_balance` if the wallet does not cover
    the price, and 404 if the plan is unknown or retired.
    """
    position, new_balance = await investment_service.purchase_plan(
        db, user_id, request.plan_id
    )
    return {
        "message": "Plan purchased successfully! Daily profits will begin.",
        "new_balance_cents": new_balance,
        "position": position,
    }


@router.get(
    "/investments",
    response_model=list[PositionResponse],
    summary="List your positions",
)
async def list_positions(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await investment_service.list_positions(db, user_id)


@router.get(
    "/investments/{position_id}",
    response_model=PositionResponse,
    summary="Get one of your positions",
)
async def get_position(
    position_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await investment_service.get_position(db, user_id, position_id)
