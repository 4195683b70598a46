"""
Wallet model: the ledger store, one row per user.

Each wallet has:
  - The owner's user ID as its primary key (identity lives in the external
    identity service, so there is no users table to point at)
  - A cached balance in integer minor units (cents/kobo)
  - The date the daily check-in bonus was last claimed

Balance management:
  `balance_cents` is a materialized view over the transaction log. It is only
  ever changed by wallet_service.adjust_balance() inside the same database
  transaction that appends the matching log entry, so it always equals

      completed credits - completed debits - pending withdrawals (held)

  A CHECK constraint enforces that the balance can never go negative. The
  services never rely on it: debits are conditional updates that refuse to
  go below zero in the first place.

Why integer minor units?
  0.1 + 0.2 != 0.3 in IEEE 754 floating point. Integers are exact, so
  50.00 is stored as 5000 and the frontend divides by 100 for display.
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Integer, Date, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from yieldwallet.database import Base


class Wallet(Base):
    __tablename__ = "wallets"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_wallets_non_negative_balance",
        ),
    )

    # Supplied by the identity service; one wallet per user
    user_id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
    )

    balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # NULL until the first daily bonus is claimed
    last_checkin_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    # Audit timestamps
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
