"""ORM models for the rentbook kernel.

All models are imported here so that Base.metadata knows every table.
"""

from rentbook_kernel.models.account import AccountType, GLAccount, NormalBalance
from rentbook_kernel.models.journal import Journal, LedgerPosting, SourceType

__all__ = [
    "GLAccount",
    "AccountType",
    "NormalBalance",
    "Journal",
    "LedgerPosting",
    "SourceType",
]
