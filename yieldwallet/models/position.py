"""
InvestmentPosition model: one purchased, running instance of a plan.

Lifecycle:
  - Created by a purchase with days_remaining = plan.duration_days,
    status "active" and last_accrual_date NULL.
  - Advanced by the accrual engine at most once per run date: one day off
    days_remaining, one daily profit onto total_profit_earned_cents,
    last_accrual_date set to the run date.
  - Becomes "completed" on the run that takes days_remaining to 0 and is
    never touched again.

last_accrual_date is the idempotency key of the batch: a position whose
last_accrual_date equals the run date is not eligible, so re-running the
batch on the same date pays nothing twice.
"""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from yieldwallet.database import Base


class PositionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class InvestmentPosition(Base):
    __tablename__ = "investment_positions"

    __table_args__ = (
        CheckConstraint(
            "days_remaining >= 0",
            name="ck_investment_positions_non_negative_days",
        ),
        CheckConstraint(
            "total_profit_earned_cents >= 0",
            name="ck_investment_positions_non_negative_profit",
        ),
        # Covers the accrual engine's eligibility scan
        Index("ix_investment_positions_due", "status", "last_accrual_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    plan_id: Mapped[int] = mapped_column(
        ForeignKey("investment_plans.id"),
        nullable=False,
    )

    # Snapshot of the plan at purchase time
    purchase_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_profit_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # start_date + duration_days; informational only
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    days_remaining: Mapped[int] = mapped_column(Integer, nullable=False)

    total_profit_earned_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # One of PositionStatus
    status: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=PositionStatus.ACTIVE,
    )

    last_accrual_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
