"""
Pure financial statement transformation functions.

These functions turn account snapshots and aggregated ledger activity into
structured statements. ZERO I/O. ZERO side effects.

All monetary values are integer cents. All inputs/outputs are frozen
dataclasses.

Conventions:
- No database access
- No clock access (``generated_at`` arrives inside ``ReportMetadata``)
- No logging (the service logs what the returned report says)
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import date
from enum import Enum
from uuid import UUID

from rentbook_kernel.domain.records import AccountInfo, PostingRecord
from rentbook_kernel.models.account import AccountType
from rentbook_kernel.models.journal import SourceType
from rentbook_modules.reporting.aggregation import (
    EMPTY_ACTIVITY,
    AccountActivity,
    natural_amount,
    split_by_normal_balance,
)
from rentbook_modules.reporting.classification import (
    SUBSECTION_KEYS,
    SUBSECTION_TITLES,
    UNCLASSIFIED,
    ClassificationGap,
    ClassificationTable,
    parse_account_number,
)
from rentbook_modules.reporting.models import (
    BalanceSheet,
    CashFlowLine,
    CashFlowSection,
    CashFlowStatement,
    IncomeStatement,
    OperatingActivities,
    PropertyComparisonRow,
    ReportMetadata,
    StatementLine,
    StatementSection,
    TrialBalance,
    TrialBalanceLine,
)

OTHER_EXPENSE_KEYS: tuple[str, ...] = ("other_expenses",)
OPERATING_EXPENSE_KEYS: tuple[str, ...] = tuple(
    key for key in SUBSECTION_KEYS[AccountType.EXPENSE]
    if key not in OTHER_EXPENSE_KEYS
)

# Cash-flow source tag used when a posting and its journal carry none.
DEFAULT_SOURCE_TYPE = "other"


# =========================================================================
# Helpers
# =========================================================================


def _leaf_accounts(accounts: Iterable[AccountInfo]) -> list[AccountInfo]:
    """Active, non-header accounts in account-number order."""
    return sorted(
        (a for a in accounts if a.is_active and a.is_leaf),
        key=lambda a: a.account_number,
    )


def _place_accounts(
    accounts: list[AccountInfo],
    activity: dict[UUID, AccountActivity],
    account_type: AccountType,
    table: ClassificationTable,
) -> tuple[dict[str, list[StatementLine]], list[ClassificationGap]]:
    """
    Bucket accounts of one type with nonzero natural amounts by subsection.

    Accounts the table cannot place go to ``UNCLASSIFIED`` and are returned
    as gaps.
    """
    placed: dict[str, list[StatementLine]] = {}
    gaps: list[ClassificationGap] = []
    for acct in accounts:
        if acct.account_type != account_type:
            continue
        amount = natural_amount(
            activity.get(acct.account_id, EMPTY_ACTIVITY), acct.normal_balance,
        )
        if amount == 0:
            continue
        key = table.classify(acct.account_type, acct.account_number)
        if key == UNCLASSIFIED:
            gaps.append(
                ClassificationGap(
                    account_id=acct.account_id,
                    account_number=acct.account_number,
                    account_name=acct.account_name,
                    account_type=acct.account_type,
                    reason=(
                        "non_numeric"
                        if parse_account_number(acct.account_number) is None
                        else "out_of_range"
                    ),
                )
            )
        placed.setdefault(key, []).append(
            StatementLine(
                account_id=acct.account_id,
                account_number=acct.account_number,
                account_name=acct.account_name,
                amount_cents=amount,
            )
        )
    return placed, gaps


def _make_subsection(key: str, lines: list[StatementLine]) -> StatementSection:
    t = tuple(lines)
    return StatementSection(
        key=key,
        title=SUBSECTION_TITLES[key],
        lines=t,
        total_cents=sum(line.amount_cents for line in t),
    )


def _make_section(
    key: str,
    title: str,
    subsection_keys: tuple[str, ...],
    placed: dict[str, list[StatementLine]],
    include_unclassified: bool = True,
) -> StatementSection:
    """
    Create a top-level section.

    Every configured subsection is present (possibly empty); an Unclassified
    subsection is appended only when something landed in it.
    """
    keys = list(subsection_keys)
    if include_unclassified and placed.get(UNCLASSIFIED):
        keys.append(UNCLASSIFIED)
    subsections = tuple(_make_subsection(k, placed.get(k, [])) for k in keys)
    return _combine(key, title, subsections)


def _combine(
    key: str,
    title: str,
    subsections: tuple[StatementSection, ...],
) -> StatementSection:
    lines = tuple(line for sub in subsections for line in sub.lines)
    return StatementSection(
        key=key,
        title=title,
        lines=lines,
        total_cents=sum(sub.total_cents for sub in subsections),
        subsections=subsections,
    )


# =========================================================================
# 1. TRIAL BALANCE
# =========================================================================


def build_trial_balance(
    accounts: Iterable[AccountInfo],
    activity: dict[UUID, AccountActivity],
    metadata: ReportMetadata,
    include_zero_balances: bool = False,
    unbalanced_journal_ids: Iterable[UUID] = (),
) -> TrialBalance:
    """
    Build a trial balance from cumulative activity.

    Rows follow the normal-balance split; rows whose two balances are both
    zero are dropped unless ``include_zero_balances``.  Sorted by account
    number (string order).
    """
    lines: list[TrialBalanceLine] = []
    for acct in _leaf_accounts(accounts):
        net = activity.get(acct.account_id, EMPTY_ACTIVITY).net_cents
        debit, credit = split_by_normal_balance(net, acct.normal_balance)
        if debit == 0 and credit == 0 and not include_zero_balances:
            continue
        lines.append(
            TrialBalanceLine(
                account_id=acct.account_id,
                account_number=acct.account_number,
                account_name=acct.account_name,
                account_type=acct.account_type,
                normal_balance=acct.normal_balance,
                debit_balance_cents=debit,
                credit_balance_cents=credit,
            )
        )

    total_debits = sum(line.debit_balance_cents for line in lines)
    total_credits = sum(line.credit_balance_cents for line in lines)

    return TrialBalance(
        metadata=metadata,
        lines=tuple(lines),
        total_debits_cents=total_debits,
        total_credits_cents=total_credits,
        is_balanced=(total_debits == total_credits),
        imbalance_cents=total_debits - total_credits,
        unbalanced_journal_ids=tuple(unbalanced_journal_ids),
    )


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


def build_balance_sheet(
    accounts: Iterable[AccountInfo],
    activity: dict[UUID, AccountActivity],
    metadata: ReportMetadata,
    table: ClassificationTable,
    current_year_earnings_cents: int,
    earnings_account_number: str = "3400",
    earnings_account_name: str = "Current Year Earnings",
    balance_tolerance_cents: int = 0,
    prior_year: BalanceSheet | None = None,
) -> BalanceSheet:
    """
    Build a classified balance sheet from cumulative activity.

    Steps:
    1. Place asset/liability/equity accounts with nonzero natural balance
    2. Sub-classify each by the classification table
    3. Append the synthetic current-year-earnings line to Equity
    4. Report A = L + E against the tolerance
    """
    leaves = _leaf_accounts(accounts)
    gaps: list[ClassificationGap] = []

    asset_lines, found = _place_accounts(leaves, activity, AccountType.ASSET, table)
    gaps.extend(found)
    liability_lines, found = _place_accounts(
        leaves, activity, AccountType.LIABILITY, table,
    )
    gaps.extend(found)
    equity_lines, found = _place_accounts(leaves, activity, AccountType.EQUITY, table)
    gaps.extend(found)

    equity_key = SUBSECTION_KEYS[AccountType.EQUITY][0]
    equity_lines.setdefault(equity_key, []).append(
        StatementLine(
            account_id=None,
            account_number=earnings_account_number,
            account_name=earnings_account_name,
            amount_cents=current_year_earnings_cents,
            is_synthetic=True,
        )
    )

    assets = _make_section(
        "assets", "Assets", SUBSECTION_KEYS[AccountType.ASSET], asset_lines,
    )
    liabilities = _make_section(
        "liabilities",
        "Liabilities",
        SUBSECTION_KEYS[AccountType.LIABILITY],
        liability_lines,
    )
    equity = _make_section(
        "equity", "Equity", SUBSECTION_KEYS[AccountType.EQUITY], equity_lines,
    )

    total_l_and_e = liabilities.total_cents + equity.total_cents
    imbalance = assets.total_cents - total_l_and_e

    return BalanceSheet(
        metadata=metadata,
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_assets_cents=assets.total_cents,
        total_liabilities_cents=liabilities.total_cents,
        total_equity_cents=equity.total_cents,
        total_liabilities_and_equity_cents=total_l_and_e,
        current_year_earnings_cents=current_year_earnings_cents,
        imbalance_cents=imbalance,
        is_balanced=abs(imbalance) <= balance_tolerance_cents,
        classification_gaps=tuple(gaps),
        prior_year=prior_year,
    )


# =========================================================================
# 3. INCOME STATEMENT
# =========================================================================


def build_income_statement(
    accounts: Iterable[AccountInfo],
    activity: dict[UUID, AccountActivity],
    metadata: ReportMetadata,
    table: ClassificationTable,
    prior_period: IncomeStatement | None = None,
    prior_year: IncomeStatement | None = None,
) -> IncomeStatement:
    """
    Build an income statement from window activity.

        Revenue
        = Gross Profit
        - Operating Expenses
        = Operating Income
        - Other Expenses
        = Net Income

    Unclassified revenue stays in Revenue; unclassified expenses count as
    operating expenses.  Other expenses are never also counted as operating.
    """
    leaves = _leaf_accounts(accounts)

    revenue_lines, revenue_gaps = _place_accounts(
        leaves, activity, AccountType.REVENUE, table,
    )
    expense_lines, expense_gaps = _place_accounts(
        leaves, activity, AccountType.EXPENSE, table,
    )

    revenue = _make_section(
        "revenue", "Revenue", SUBSECTION_KEYS[AccountType.REVENUE], revenue_lines,
    )
    operating = _make_section(
        "operating_expenses",
        "Operating Expenses",
        OPERATING_EXPENSE_KEYS,
        expense_lines,
    )
    other = _make_section(
        "other_expenses",
        "Other Expenses",
        OTHER_EXPENSE_KEYS,
        expense_lines,
        include_unclassified=False,
    )
    expenses = _combine(
        "expenses", "Expenses", operating.subsections + other.subsections,
    )

    gross_profit = revenue.total_cents
    operating_income = gross_profit - operating.total_cents
    net_income = operating_income - other.total_cents

    return IncomeStatement(
        metadata=metadata,
        revenue=revenue,
        operating_expenses=operating,
        other_expenses=other,
        expenses=expenses,
        total_revenue_cents=revenue.total_cents,
        total_expenses_cents=expenses.total_cents,
        gross_profit_cents=gross_profit,
        operating_income_cents=operating_income,
        net_income_cents=net_income,
        classification_gaps=tuple(revenue_gaps + expense_gaps),
        prior_period=prior_period,
        prior_year=prior_year,
    )


# =========================================================================
# 4. CASH FLOW STATEMENT (simplified direct method)
# =========================================================================


def group_by_source_type(
    cash_postings: Iterable[PostingRecord],
) -> dict[str, AccountActivity]:
    """Sum cash-account postings per source tag (missing tag -> "other")."""
    debits: dict[str, int] = {}
    credits: dict[str, int] = {}
    for posting in cash_postings:
        tag = posting.source_type or DEFAULT_SOURCE_TYPE
        debits[tag] = debits.get(tag, 0) + posting.debit_cents
        credits[tag] = credits.get(tag, 0) + posting.credit_cents
    return {
        tag: AccountActivity(debits[tag], credits[tag])
        for tag in sorted(debits)
    }


def _cash_section(title: str, lines: list[CashFlowLine]) -> CashFlowSection:
    return CashFlowSection(
        title=title,
        lines=tuple(lines),
        total_cents=sum(line.amount_cents for line in lines),
    )


def build_cash_flow_statement(
    cash_postings: Iterable[PostingRecord],
    metadata: ReportMetadata,
    opening_cash_cents: int,
    closing_cash_cents: int,
) -> CashFlowStatement:
    """
    Build a cash flow statement from the window's cash-account postings.

    Per source tag (net = debits - credits):
    - rent_payment         -> Operating receipts "Rent Receipts" (debits)
    - expense              -> Operating payments "Operating Expenses" (credits)
    - special_transaction  -> Financing: "Owner Contributions" when net > 0,
                              else "Owner Draws" (|net|); the section total
                              adds the signed net
    - anything else        -> "Other Receipts" when net > 0, else
                              "Other Payments" (|net|)

    Investing has no source tags yet and is always empty.  Groups whose
    presented amount is zero are omitted.
    """
    receipts: list[CashFlowLine] = []
    payments: list[CashFlowLine] = []
    financing_lines: list[CashFlowLine] = []
    financing_total = 0

    for tag, amounts in group_by_source_type(cash_postings).items():
        net = amounts.net_cents

        if tag == SourceType.RENT_PAYMENT.value:
            if amounts.debits_cents:
                receipts.append(
                    CashFlowLine("Rent Receipts", tag, amounts.debits_cents, net)
                )
        elif tag == SourceType.EXPENSE.value:
            if amounts.credits_cents:
                payments.append(
                    CashFlowLine("Operating Expenses", tag, amounts.credits_cents, net)
                )
        elif tag == SourceType.SPECIAL_TRANSACTION.value:
            if net:
                label = "Owner Contributions" if net > 0 else "Owner Draws"
                financing_lines.append(CashFlowLine(label, tag, abs(net), net))
            financing_total += net
        elif net > 0:
            receipts.append(CashFlowLine("Other Receipts", tag, net, net))
        elif net < 0:
            payments.append(CashFlowLine("Other Payments", tag, -net, net))

    receipts_section = _cash_section("Receipts", receipts)
    payments_section = _cash_section("Payments", payments)
    operating = OperatingActivities(
        receipts=receipts_section,
        payments=payments_section,
        net_cents=receipts_section.total_cents - payments_section.total_cents,
    )
    investing = _cash_section("Investing Activities", [])
    financing = CashFlowSection(
        title="Financing Activities",
        lines=tuple(financing_lines),
        total_cents=financing_total,
    )

    net_change = operating.net_cents + investing.total_cents + financing.total_cents

    return CashFlowStatement(
        metadata=metadata,
        operating=operating,
        investing=investing,
        financing=financing,
        net_change_cents=net_change,
        opening_cash_cents=opening_cash_cents,
        closing_cash_cents=closing_cash_cents,
        cash_change_reconciles=(
            closing_cash_cents - opening_cash_cents == net_change
        ),
    )


# =========================================================================
# 5. PROPERTY COMPARISON
# =========================================================================


def build_property_comparison_row(
    property_id: UUID,
    statement: IncomeStatement,
) -> PropertyComparisonRow:
    """Tabulate one property's income statement."""
    return PropertyComparisonRow(
        property_id=property_id,
        revenue_cents=statement.revenue.total_cents,
        expenses_cents=statement.operating_expenses.total_cents,
        net_income_cents=statement.net_income_cents,
        noi_cents=statement.operating_income_cents,
    )


# =========================================================================
# 6. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain data for JSON serialization.

    Handles:
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
