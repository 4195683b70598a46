"""
Pydantic schemas for the accrual batch endpoint.
"""

import uuid
from datetime import date

from pydantic import BaseModel


class AccrualRunRequest(BaseModel):
    """Request body for POST /admin/accrual/run; run_date defaults to today (UTC)."""
    run_date: date | None = None


class AccrualFailureResponse(BaseModel):
    position_id: uuid.UUID
    error: str

    model_config = {"from_attributes": True}


class AccrualReportResponse(BaseModel):
    success: bool = True
    message: str
    run_date: date
    processed: int
    completed: int
    skipped: int
    failures: list[AccrualFailureResponse]
