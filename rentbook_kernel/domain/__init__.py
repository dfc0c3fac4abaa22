"""
Pure domain layer.

Immutable records and the injectable clock.  No database access, no I/O.
"""

from rentbook_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rentbook_kernel.domain.records import (
    POSTING_RECORD_VERSION,
    AccountInfo,
    BankAccountInfo,
    PostingRecord,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccountInfo",
    "BankAccountInfo",
    "PostingRecord",
    "POSTING_RECORD_VERSION",
]
