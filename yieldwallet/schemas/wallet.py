"""
Pydantic schemas for wallet endpoints.

All monetary amounts are in integer minor units (e.g., 50.00 = 5000).
Every successful mutation returns `success`, a human-readable `message` and
the wallet balance after the operation.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from yieldwallet.schemas.transaction import TransactionResponse


class WalletResponse(BaseModel):
    """Public representation of a wallet."""
    user_id: uuid.UUID
    balance_cents: int
    last_checkin_date: date | None
    created_at: datetime

    model_config = {"from_attributes": True}


class WalletOpenResponse(BaseModel):
    success: bool = True
    message: str
    wallet: WalletResponse


class BalanceResponse(BaseModel):
    """
    Balance check response: includes both cached and computed values.

    `match` tells whether the cached balance agrees with the balance
    recomputed from the transaction log. A mismatch indicates a data
    integrity issue.
    """
    user_id: uuid.UUID
    balance_cents: int
    computed_balance_cents: int
    match: bool
    last_checkin_date: date | None
    currency: str


class AdminCreditRequest(BaseModel):
    """Request body for POST /admin/wallets/{user_id}/credit."""
    amount_cents: int = Field(gt=0, description="Amount in minor units (must be positive)")
    description: str | None = Field(None, max_length=255)


class LedgerUpdateResponse(BaseModel):
    """A completed credit (admin credit, check-in bonus, recharge approval)."""
    success: bool = True
    message: str
    new_balance_cents: int
    transaction: TransactionResponse
