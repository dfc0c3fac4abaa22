"""
Records -- Canonical in-memory shapes for chart and ledger rows.

Responsibility:
    Defines the immutable records that selectors hand to the reporting
    engine.  Stored rows come in more than one shape (the source tag lives
    on the journal for older rows and on the posting for newer ones; the
    stored date column is ``transaction_date`` while reports speak of
    ``posting_date``).  Selectors normalise every row into these records so
    no builder ever sees a storage shape.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Built only by selectors
    (``from_row`` boundary converters); consumed by reporting builders.

Invariants enforced:
    - ``debit_cents`` and ``credit_cents`` are non-negative integers.
    - Records are frozen and hashable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from rentbook_kernel.models.account import AccountType, NormalBalance

POSTING_RECORD_VERSION = 1


@dataclass(frozen=True)
class AccountInfo:
    """
    Snapshot of one chart-of-accounts entry.

    The engine treats accounts as immutable; chart maintenance happens
    elsewhere.
    """

    account_id: UUID
    account_number: str
    account_name: str
    account_type: AccountType
    normal_balance: NormalBalance
    is_active: bool = True
    is_header_account: bool = False
    is_bank_account: bool = False

    @property
    def is_leaf(self) -> bool:
        """Header accounts aggregate children and never carry postings."""
        return not self.is_header_account


@dataclass(frozen=True)
class BankAccountInfo:
    """A cash/bank account as returned by the bank-account reader."""

    account_id: UUID
    account_number: str
    current_balance_cents: int = 0


@dataclass(frozen=True)
class PostingRecord:
    """
    One posted ledger line in canonical form.

    Contract:
        ``source_type`` is the posting's own tag when present, otherwise the
        parent journal's tag, otherwise None.
    """

    account_id: UUID
    debit_cents: int
    credit_cents: int
    posting_date: date
    journal_id: UUID | None = None
    property_id: UUID | None = None
    source_type: str | None = None
    version: int = POSTING_RECORD_VERSION

    def __post_init__(self) -> None:
        if self.debit_cents < 0 or self.credit_cents < 0:
            raise ValueError(
                f"Posting amounts must be non-negative: "
                f"debit={self.debit_cents}, credit={self.credit_cents}"
            )
