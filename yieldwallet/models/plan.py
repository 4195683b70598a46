"""
InvestmentPlan model: the plan catalog.

The catalog is administered elsewhere; this service only reads it. A plan
is offered while `is_active` is true. Purchases copy `price_cents` and
`daily_profit_cents` onto the position, so later edits to a plan never
change positions that already exist.

`total_roi_cents` is the advertised total return. Nothing checks accrued
profit against it: a position is paid `daily_profit_cents` once per day for
`duration_days` days, whatever the advertised total says.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yieldwallet.database import Base


class InvestmentPlan(Base):
    __tablename__ = "investment_plans"

    __table_args__ = (
        CheckConstraint("price_cents > 0", name="ck_investment_plans_positive_price"),
        CheckConstraint("duration_days > 0", name="ck_investment_plans_positive_duration"),
        CheckConstraint(
            "daily_profit_cents > 0",
            name="ck_investment_plans_positive_daily_profit",
        ),
    )

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_profit_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_roi_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
