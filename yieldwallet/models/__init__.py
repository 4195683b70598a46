"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. Other modules can import from yieldwallet.models directly
"""

from yieldwallet.models.wallet import Wallet  # noqa: F401
from yieldwallet.models.transaction import Transaction, TransactionType, TransactionStatus  # noqa: F401
from yieldwallet.models.plan import InvestmentPlan  # noqa: F401
from yieldwallet.models.position import InvestmentPosition, PositionStatus  # noqa: F401
from yieldwallet.models.withdrawal import WithdrawalRequest, WithdrawalStatus  # noqa: F401
