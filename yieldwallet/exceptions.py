"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientBalanceError)
without importing HTTP concepts. The handler layer then translates them into
a consistent failure payload:

    {"success": false, "detail": "<message>", "error_type": "<kind>"}

Every validation and business-rule error is raised before the enclosing
unit of work has changed anything; errors raised inside atomic() roll the
whole unit back.

Exception hierarchy:
    WalletAPIError (base)
    ├── InputValidationError      (malformed or non-positive input)
    ├── NotFoundError             (referenced record is absent)
    │   ├── WalletNotFoundError
    │   ├── PlanNotFoundError
    │   ├── PlanInactiveError
    │   ├── PositionNotFoundError
    │   ├── WithdrawalRequestNotFoundError
    │   └── TransactionNotFoundError
    ├── InvalidStateError         (operation not valid for the current status)
    ├── InsufficientBalanceError  (debit larger than the wallet balance)
    ├── AlreadyClaimedError       (daily bonus already taken today)
    ├── ConflictError             (concurrent mutation or lock contention)
    └── PersistenceError          (storage failure, opaque to callers)
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class WalletAPIError(Exception):
    """Base exception for all Yield Wallet domain errors."""

    status_code: int = 400
    error_type: str = "error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class InputValidationError(WalletAPIError):
    """Raised for malformed input the request schema could not catch."""

    status_code = 422
    error_type = "validation_error"


class NotFoundError(WalletAPIError):
    status_code = 404
    error_type = "not_found"


class WalletNotFoundError(NotFoundError):
    """Raised when a user has no wallet opened."""

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"Wallet for user {user_id} not found")


class PlanNotFoundError(NotFoundError):
    def __init__(self, plan_id: int):
        self.plan_id = plan_id
        super().__init__(f"Investment plan {plan_id} not found")


class PlanInactiveError(NotFoundError):
    """Raised when a plan exists but is no longer offered for purchase."""

    error_type = "plan_inactive"

    def __init__(self, plan_id: int):
        self.plan_id = plan_id
        super().__init__(f"Investment plan {plan_id} is not active")


class PositionNotFoundError(NotFoundError):
    def __init__(self, position_id: uuid.UUID):
        self.position_id = position_id
        super().__init__(f"Investment position {position_id} not found")


class WithdrawalRequestNotFoundError(NotFoundError):
    def __init__(self, request_id: uuid.UUID):
        self.request_id = request_id
        super().__init__(f"Withdrawal request {request_id} not found")


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: uuid.UUID):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class InvalidStateError(WalletAPIError):
    """Raised when an operation is not valid for a record's current status."""

    status_code = 409
    error_type = "invalid_state"


class InsufficientBalanceError(WalletAPIError):
    """
    Raised when a debit would take the wallet below zero.

    Attributes:
        user_id: The wallet owner.
        requested_cents: The amount the caller tried to debit.
        available_cents: The balance at the time of the check.
    """

    status_code = 422  # the request was valid but business rules reject it
    error_type = "insufficient_balance"

    def __init__(
        self,
        user_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.user_id = user_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient balance: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )


class AlreadyClaimedError(WalletAPIError):
    status_code = 409
    error_type = "already_claimed"

    def __init__(self):
        super().__init__(
            "You have already claimed your bonus today. Come back tomorrow!"
        )


class ConflictError(WalletAPIError):
    """Raised when the database rejects a write because of a concurrent one."""

    status_code = 409
    error_type = "conflict"

    def __init__(self, detail: str = "The wallet is busy with another operation, please retry"):
        super().__init__(detail)


class PersistenceError(WalletAPIError):
    """Raised when the storage layer fails; the cause is only logged."""

    status_code = 500
    error_type = "persistence_failure"

    def __init__(self, detail: str = "The operation could not be completed"):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every domain error is rendered with its own status code and error_type.
    This is called once during app startup in main.py.
    """

    @app.exception_handler(InsufficientBalanceError)
    async def insufficient_balance_handler(
        request: Request, exc: InsufficientBalanceError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "detail": exc.detail,
                "error_type": exc.error_type,
                "requested_cents": exc.requested_cents,
                "available_cents": exc.available_cents,
            },
        )

    @app.exception_handler(WalletAPIError)
    async def wallet_api_error_handler(
        request: Request, exc: WalletAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "detail": exc.detail,
                "error_type": exc.error_type,
            },
        )
