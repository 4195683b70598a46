"""
Pydantic schemas for the plan catalog and investment positions.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from yieldwallet.models.position import PositionStatus


class PlanResponse(BaseModel):
    """A plan on offer."""
    id: int
    name: str
    price_cents: int
    duration_days: int
    daily_profit_cents: int
    total_roi_cents: int

    model_config = {"from_attributes": True}


class PurchaseRequest(BaseModel):
    """Request body for POST /investments."""
    plan_id: int = Field(gt=0)


class PositionResponse(BaseModel):
    """Public representation of an investment position."""
    id: uuid.UUID
    user_id: uuid.UUID
    plan_id: int
    purchase_price_cents: int
    daily_profit_cents: int
    start_date: date
    end_date: date
    days_remaining: int
    total_profit_earned_cents: int
    status: PositionStatus
    last_accrual_date: date | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PurchaseResponse(BaseModel):
    success: bool = True
    message: str
    new_balance_cents: int
    position: PositionResponse
