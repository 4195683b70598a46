"""
Pydantic schemas for transaction log and recharge endpoints.

All monetary amounts are in integer minor units. `amount_cents` is always
positive; `type` says which way the money moved.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from yieldwallet.models.transaction import TransactionStatus, TransactionType


class TransactionResponse(BaseModel):
    """Public representation of a transaction log entry."""
    id: uuid.UUID
    user_id: uuid.UUID
    type: TransactionType
    amount_cents: int
    description: str | None
    status: TransactionStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class RechargeRequest(BaseModel):
    """Request body for POST /recharges."""
    amount_cents: int = Field(gt=0, description="Amount in minor units (must be positive)")


class RechargeResponse(BaseModel):
    success: bool = True
    message: str
    transaction: TransactionResponse


class AdminNotesRequest(BaseModel):
    """Optional reason attached to an admin approval or rejection."""
    admin_notes: str | None = Field(None, max_length=255)
