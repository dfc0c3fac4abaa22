"""
Module: rentbook_kernel.models.journal
Responsibility: ORM persistence for journals (the business transaction that
    groups postings) and the posted general ledger.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by the write path, verified on read by selectors):
    - Within one journal, sum(debit_cents) == sum(credit_cents).
    - Ledger rows are append-only; the reporting engine never mutates them.
    - debit_cents and credit_cents are non-negative.

Shape notes:
    Older ledger rows carry the source tag only on their journal; newer rows
    also carry it directly.  The ledger selector resolves the two into one
    canonical PostingRecord.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbook_kernel.db.base import BusinessScopedBase, UUIDString

if TYPE_CHECKING:
    from rentbook_kernel.models.account import GLAccount


class SourceType(str, Enum):
    """Known source tags on journals and postings.

    The column is free text; unknown tags are legal and are reported under
    "other" receipts/payments by the cash flow statement.
    """

    MANUAL = "manual"
    RENT_PAYMENT = "rent_payment"
    EXPENSE = "expense"
    SPECIAL_TRANSACTION = "special_transaction"
    SECURITY_DEPOSIT = "security_deposit"
    LATE_FEE = "late_fee"
    REFUND = "refund"
    TRANSFER = "transfer"
    DEPRECIATION = "depreciation"
    BANK_FEE = "bank_fee"
    INTEREST = "interest"
    ADJUSTMENT = "adjustment"
    IMPORT = "import"


class Journal(BusinessScopedBase):
    """A posted business transaction: one or more balanced ledger rows."""

    __tablename__ = "gl_journals"

    __table_args__ = (
        Index("idx_gl_journal_business_date", "business_id", "journal_date"),
    )

    journal_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    journal_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    journal_type: Mapped[str] = mapped_column(
        String(30),
        default="general",
        nullable=False,
    )

    source_type: Mapped[str | None] = mapped_column(
        String(40),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    postings: Mapped[list["LedgerPosting"]] = relationship(
        back_populates="journal",
    )

    def __repr__(self) -> str:
        return f"<Journal {self.journal_number} {self.journal_date}>"


class LedgerPosting(BusinessScopedBase):
    """
    One posted debit or credit against one account.

    Exactly one of debit_cents / credit_cents is normally nonzero; both are
    stored so that sums never need a side column.
    """

    __tablename__ = "gl_ledger"

    __table_args__ = (
        CheckConstraint("debit_cents >= 0", name="ck_gl_ledger_debit_nonneg"),
        CheckConstraint("credit_cents >= 0", name="ck_gl_ledger_credit_nonneg"),
        Index("idx_gl_ledger_account_date", "account_id", "transaction_date"),
        Index("idx_gl_ledger_business_date", "business_id", "transaction_date"),
        Index("idx_gl_ledger_property", "property_id"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("gl_accounts.id"),
        nullable=False,
    )

    journal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("gl_journals.id"),
        nullable=False,
    )

    transaction_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    debit_cents: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    credit_cents: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    property_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    source_type: Mapped[str | None] = mapped_column(
        String(40),
        nullable=True,
    )

    account: Mapped["GLAccount"] = relationship(back_populates="postings")
    journal: Mapped["Journal"] = relationship(back_populates="postings")

    def __repr__(self) -> str:
        return (
            f"<LedgerPosting {self.transaction_date} "
            f"Dr {self.debit_cents} Cr {self.credit_cents}>"
        )
