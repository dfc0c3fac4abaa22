"""Selectors for the rentbook kernel (read side)."""

from rentbook_kernel.selectors.account_selector import AccountSelector
from rentbook_kernel.selectors.base import BaseSelector
from rentbook_kernel.selectors.ledger_selector import LedgerSelector

__all__ = [
    "BaseSelector",
    "AccountSelector",
    "LedgerSelector",
]
