"""
Pydantic schemas for the withdrawal workflow.

Bank fields are required and must not be blank; the service repeats the
check after trimming whitespace.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from yieldwallet.models.withdrawal import WithdrawalStatus


class WithdrawalCreateRequest(BaseModel):
    """Request body for POST /withdrawals."""
    amount_cents: int = Field(gt=0, description="Amount in minor units (must be positive)")
    bank_name: str = Field(min_length=1, max_length=100)
    account_number: str = Field(min_length=1, max_length=30)
    account_name: str = Field(min_length=1, max_length=100)


class WithdrawalResponse(BaseModel):
    """Public representation of a withdrawal request."""
    id: uuid.UUID
    user_id: uuid.UUID
    amount_cents: int
    bank_name: str
    account_number: str
    account_name: str
    status: WithdrawalStatus
    admin_notes: str | None
    transaction_id: uuid.UUID | None
    request_date: datetime
    processed_date: datetime | None

    model_config = {"from_attributes": True}


class WithdrawalActionResponse(BaseModel):
    """Response for filing, approving or rejecting a request."""
    success: bool = True
    message: str
    withdrawal: WithdrawalResponse
    # Present when the operation moved money (request hold, rejection refund)
    new_balance_cents: int | None = None
