"""
Transaction model: the append-only audit trail of every balance event.

Every movement of money creates exactly one Transaction row in the same
database transaction as the balance change it explains:

  - admin_credit   manual credit by an operator            (credit)
  - recharge       off-platform payment confirmed by admin (credit)
  - profit         one day of accrual on a position        (credit)
  - checkin_bonus  daily check-in bonus                    (credit)
  - plan_purchase  price of a plan bought from the wallet  (debit)
  - withdrawal     payout to the user's bank               (debit)

Key fields:
  - amount_cents: Always positive; the direction is implied by the type
  - status: "pending", "completed" or "cancelled"

Status field:
  Most entries are written as "completed". Two flows write "pending" rows
  that an admin finalizes later, exactly once:
    - withdrawal: the funds are already held (debited) while pending;
      approval completes the entry, rejection cancels it and refunds
    - recharge: nothing is credited while pending; approval completes the
      entry and credits, rejection cancels it
  Rows are never deleted.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Text, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yieldwallet.database import Base


class TransactionType(str, enum.Enum):
    ADMIN_CREDIT = "admin_credit"
    RECHARGE = "recharge"
    WITHDRAWAL = "withdrawal"
    PLAN_PURCHASE = "plan_purchase"
    PROFIT = "profit"
    CHECKIN_BONUS = "checkin_bonus"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Types that add to the wallet when completed; the rest subtract
CREDIT_TYPES = (
    TransactionType.ADMIN_CREDIT,
    TransactionType.RECHARGE,
    TransactionType.PROFIT,
    TransactionType.CHECKIN_BONUS,
)
DEBIT_TYPES = (
    TransactionType.WITHDRAWAL,
    TransactionType.PLAN_PURCHASE,
)


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Amount must always be positive; direction is indicated by type
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    # One of TransactionType
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Unbounded: a rejection appends the admin note to the original memo
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # One of TransactionStatus
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=TransactionStatus.PENDING,
    )

    # Indexed for newest-first listing and the latest-pending lookup
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
