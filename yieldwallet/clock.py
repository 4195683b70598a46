"""
Business-date helper.

Ledger dates (check-in day, accrual run date, position start date) are UTC
calendar dates everywhere, so a claim at 23:59 and a batch run at 00:05 can
never disagree about which day it is. Services take an optional `today`
argument for tests and backfills and fall back to this.
"""

from datetime import date, datetime, timezone


def utc_today() -> date:
    """The current UTC calendar date."""
    return datetime.now(timezone.utc).date()
