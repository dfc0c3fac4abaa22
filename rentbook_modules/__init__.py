"""
Rentbook Modules.

Thin orchestration layers over the rentbook kernel.

Modules:
- Reporting: trial balance, balance sheet, income statement, cash flow and
  property comparison over the posted ledger (read-only).
"""

from rentbook_modules import reporting

__all__ = ["reporting"]
