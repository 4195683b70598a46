"""
WithdrawalRequest model: a payout awaiting manual approval.

State machine:

    pending ──approve──> approved   (terminal)
       │
       └────reject────> rejected   (terminal)

While a request is pending its amount has already been debited from the
wallet (the hold). The request points at its paired "withdrawal"
transaction through `transaction_id`, so approval and rejection finalize
exactly that entry even when the user has several pending withdrawals of
the same amount.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yieldwallet.database import Base


class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_withdrawal_requests_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    # Destination bank details
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_number: Mapped[str] = mapped_column(String(30), nullable=False)
    account_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # One of WithdrawalStatus
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=WithdrawalStatus.PENDING,
        index=True,
    )

    admin_notes: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # The paired pending "withdrawal" entry. Nullable for rows written
    # before the link existed; those fall back to the latest-pending lookup.
    transaction_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("transactions.id"),
        nullable=True,
    )

    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    processed_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
