"""
Rentbook Kernel

Read-side foundation for property-ledger reporting:
- Chart of accounts, journals and posted ledger (SQLAlchemy ORM)
- Read-only selectors that normalise stored rows into canonical records
- Injectable clock
- Structured JSON logging
- Typed exceptions
"""

__version__ = "0.1.0"
