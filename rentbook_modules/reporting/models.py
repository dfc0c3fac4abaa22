"""
Financial Reporting Domain Models (``rentbook_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects representing report outputs: trial balance,
balance sheet, income statement, simplified cash flow statement and the
per-property comparison row.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the pure
functions in ``statements.py``; returned to callers by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields are integer cents -- NEVER ``float``.
* ``ReportMetadata.generated_at`` is excluded from equality, so two reports
  computed from identical inputs compare equal.
* A comparison statement (``prior_year`` / ``prior_period``) never carries
  comparisons of its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from uuid import UUID

from rentbook_kernel.models.account import AccountType, NormalBalance
from rentbook_modules.reporting.classification import ClassificationGap


# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Types of financial reports."""

    TRIAL_BALANCE = "trial_balance"
    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"
    CASH_FLOW = "cash_flow"
    PROPERTY_COMPARISON = "property_comparison"


# =========================================================================
# Report Metadata (common to all reports)
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every financial report."""

    report_type: ReportType
    business_id: UUID
    entity_name: str
    currency_code: str
    as_of_date: date
    generated_at: str = field(compare=False)  # ISO timestamp from injected clock
    period_start: date | None = None
    period_end: date | None = None
    property_id: UUID | None = None
    classification_version: str | None = None


# =========================================================================
# Trial Balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceLine:
    """One account row; at most one of the two balances is nonzero."""

    account_id: UUID
    account_number: str
    account_name: str
    account_type: AccountType
    normal_balance: NormalBalance
    debit_balance_cents: int
    credit_balance_cents: int


@dataclass(frozen=True)
class TrialBalance:
    """
    Per-account balances as of a date.

    ``is_balanced`` is expected to hold by construction; False signals a
    ledger-integrity defect.  ``unbalanced_journal_ids`` names the journals
    responsible when the ledger itself is at fault.
    """

    metadata: ReportMetadata
    lines: tuple[TrialBalanceLine, ...]
    total_debits_cents: int
    total_credits_cents: int
    is_balanced: bool
    imbalance_cents: int  # total_debits - total_credits
    unbalanced_journal_ids: tuple[UUID, ...] = ()

    @property
    def as_of_date(self) -> date:
        return self.metadata.as_of_date

    @property
    def generated_at(self) -> str:
        return self.metadata.generated_at


# =========================================================================
# Classified statements (balance sheet / income statement)
# =========================================================================


@dataclass(frozen=True)
class StatementLine:
    """An account (or synthetic line) with its natural-sign amount."""

    account_id: UUID | None
    account_number: str
    account_name: str
    amount_cents: int
    is_synthetic: bool = False


@dataclass(frozen=True)
class StatementSection:
    """
    A titled group of lines.

    Top-level sections (Assets, Revenue, ...) hold their subsections and a
    flattened view of every line under them; subsections hold lines only.
    """

    key: str
    title: str
    lines: tuple[StatementLine, ...]
    total_cents: int
    subsections: tuple[StatementSection, ...] = ()

    def subsection(self, key: str) -> StatementSection | None:
        for sub in self.subsections:
            if sub.key == key:
                return sub
        return None


@dataclass(frozen=True)
class BalanceSheet:
    """
    Classified Assets / Liabilities / Equity as of a date.

    Equity includes a synthetic current-year-earnings line that exists only
    in the report.  A = L + E is reported, not enforced: check
    ``is_balanced`` and surface ``imbalance_cents``.
    """

    metadata: ReportMetadata
    assets: StatementSection
    liabilities: StatementSection
    equity: StatementSection
    total_assets_cents: int
    total_liabilities_cents: int
    total_equity_cents: int
    total_liabilities_and_equity_cents: int
    current_year_earnings_cents: int
    imbalance_cents: int  # assets - (liabilities + equity)
    is_balanced: bool
    classification_gaps: tuple[ClassificationGap, ...] = ()
    prior_year: BalanceSheet | None = None

    @property
    def as_of_date(self) -> date:
        return self.metadata.as_of_date

    @property
    def generated_at(self) -> str:
        return self.metadata.generated_at

    @property
    def prior_year_assets_cents(self) -> int | None:
        return self.prior_year.total_assets_cents if self.prior_year else None

    @property
    def prior_year_liabilities_cents(self) -> int | None:
        return self.prior_year.total_liabilities_cents if self.prior_year else None

    @property
    def prior_year_equity_cents(self) -> int | None:
        return self.prior_year.total_equity_cents if self.prior_year else None


@dataclass(frozen=True)
class IncomeStatement:
    """
    Income statement (P&L) over an inclusive date window.

        Revenue
        = Gross Profit
        - Operating Expenses
        = Operating Income (NOI)
        - Other Expenses
        = Net Income

    ``expenses`` is the combined view: operating subsections followed by
    other expenses, totalling ``total_expenses_cents``.
    """

    metadata: ReportMetadata
    revenue: StatementSection
    operating_expenses: StatementSection
    other_expenses: StatementSection
    expenses: StatementSection
    total_revenue_cents: int
    total_expenses_cents: int
    gross_profit_cents: int
    operating_income_cents: int
    net_income_cents: int
    classification_gaps: tuple[ClassificationGap, ...] = ()
    prior_period: IncomeStatement | None = None
    prior_year: IncomeStatement | None = None

    @property
    def start_date(self) -> date:
        return self.metadata.period_start

    @property
    def end_date(self) -> date:
        return self.metadata.period_end

    @property
    def generated_at(self) -> str:
        return self.metadata.generated_at

    @property
    def prior_period_revenue(self) -> StatementSection | None:
        return self.prior_period.revenue if self.prior_period else None

    @property
    def prior_period_expenses(self) -> StatementSection | None:
        return self.prior_period.expenses if self.prior_period else None

    @property
    def prior_year_revenue(self) -> StatementSection | None:
        return self.prior_year.revenue if self.prior_year else None

    @property
    def prior_year_expenses(self) -> StatementSection | None:
        return self.prior_year.expenses if self.prior_year else None


# =========================================================================
# Cash Flow Statement (simplified direct method)
# =========================================================================


@dataclass(frozen=True)
class CashFlowLine:
    """
    One source-type group of cash-account activity.

    ``amount_cents`` is the presented (non-negative) amount;
    ``net_cents`` is the group's signed debits - credits.
    """

    description: str
    source_type: str
    amount_cents: int
    net_cents: int


@dataclass(frozen=True)
class CashFlowSection:
    """A section of the cash flow statement."""

    title: str
    lines: tuple[CashFlowLine, ...]
    total_cents: int


@dataclass(frozen=True)
class OperatingActivities:
    """Operating receipts and payments; net = receipts - payments."""

    receipts: CashFlowSection
    payments: CashFlowSection
    net_cents: int


@dataclass(frozen=True)
class CashFlowStatement:
    """
    Simplified direct-method cash flow statement.

    Opening cash is the bank-account balance at the close of the day before
    the window; closing cash is the balance through the window's end.
    """

    metadata: ReportMetadata
    operating: OperatingActivities
    investing: CashFlowSection
    financing: CashFlowSection
    net_change_cents: int
    opening_cash_cents: int
    closing_cash_cents: int
    cash_change_reconciles: bool  # closing - opening == net_change

    @property
    def start_date(self) -> date:
        return self.metadata.period_start

    @property
    def end_date(self) -> date:
        return self.metadata.period_end

    @property
    def generated_at(self) -> str:
        return self.metadata.generated_at


# =========================================================================
# Property comparison
# =========================================================================


@dataclass(frozen=True)
class PropertyComparisonRow:
    """Headline figures of one property's income statement."""

    property_id: UUID
    revenue_cents: int
    expenses_cents: int  # operating expenses
    net_income_cents: int
    noi_cents: int
