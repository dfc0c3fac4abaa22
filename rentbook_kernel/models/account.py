"""
Module: rentbook_kernel.models.account
Responsibility: ORM persistence for the chart of accounts -- the target of
    every ledger posting.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - account_type / normal_balance are immutable once postings reference the
      account (maintained by chart-of-accounts management, not here).
    - Header accounts aggregate their children and never receive postings.

Audit relevance:
    The reporting engine reads accounts; it never writes them.
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbook_kernel.db.base import BusinessScopedBase, UUIDString

if TYPE_CHECKING:
    from rentbook_kernel.models.journal import LedgerPosting


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Normal balance side for an account."""

    DEBIT = "debit"
    CREDIT = "credit"


class GLAccount(BusinessScopedBase):
    """
    Chart of accounts entry for one business.

    Contract:
        (business_id, account_number) is unique.  account_number is a string
        so that lexicographic ordering matches the printed chart.

    Non-goals:
        - current_balance_cents is a cached figure maintained by the write
          path.  Reports never use it; every reported balance is derived
          from ledger postings.
    """

    __tablename__ = "gl_accounts"

    __table_args__ = (
        UniqueConstraint(
            "business_id", "account_number", name="uq_gl_account_number",
        ),
        Index("idx_gl_account_business_type", "business_id", "account_type"),
        Index("idx_gl_account_active", "business_id", "is_active"),
    )

    account_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    account_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    account_type: Mapped[AccountType] = mapped_column(
        String(20),
        nullable=False,
    )

    normal_balance: Mapped[NormalBalance] = mapped_column(
        String(10),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    is_header_account: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    is_bank_account: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    parent_account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    current_balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    postings: Mapped[list["LedgerPosting"]] = relationship(
        back_populates="account",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<GLAccount {self.account_number}: {self.account_name}>"
