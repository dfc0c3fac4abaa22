"""
Financial report invariant tests.

Verifies cross-report accounting invariants that must ALWAYS hold for a
ledger of balanced journals:
- TB debits = TB credits
- A = L + E once current-year earnings are injected
- IS net income = revenue - expenses
- Cash flow closing = opening + net change for conventionally tagged activity
- Each TB row carries at most one nonzero, non-negative side

Hypothesis generates the journals; the pure builders are exercised directly
so no database is involved.
"""

from __future__ import annotations

from datetime import date, timedelta
from uuid import UUID

from hypothesis import given, settings
from hypothesis import strategies as st

from rentbook_kernel.models.account import AccountType
from rentbook_modules.reporting.aggregation import aggregate_postings
from rentbook_modules.reporting.classification import DEFAULT_CLASSIFICATION_TABLE
from rentbook_modules.reporting.comparison import prior_period_window, shift_years
from rentbook_modules.reporting.models import ReportMetadata, ReportType
from rentbook_modules.reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_income_statement,
    build_trial_balance,
)

from tests.reporting.conftest import make_account_info, make_posting

BANK = make_account_info("1000", "Bank", AccountType.ASSET, is_bank_account=True)
RECEIVABLE = make_account_info("1200", "Tenant Receivables", AccountType.ASSET)
BUILDING = make_account_info("1600", "Building", AccountType.ASSET)
SUSPENSE = make_account_info("9500", "Suspense", AccountType.ASSET)
DEPOSITS = make_account_info("2100", "Security Deposits Held", AccountType.LIABILITY)
MORTGAGE = make_account_info("2600", "Mortgage Payable", AccountType.LIABILITY)
CAPITAL = make_account_info("3000", "Owner Capital", AccountType.EQUITY)
RENT = make_account_info("4000", "Rent Income", AccountType.REVENUE)
LATE_FEES = make_account_info("4200", "Late Fees", AccountType.REVENUE)
REPAIRS = make_account_info("5100", "Repairs", AccountType.EXPENSE)
UTILITIES = make_account_info("5200", "Utilities", AccountType.EXPENSE)
INTEREST = make_account_info("6100", "Mortgage Interest", AccountType.EXPENSE)
PARKING = make_account_info("4500", "Parking Costs", AccountType.EXPENSE)

CHART = [
    BANK, RECEIVABLE, BUILDING, SUSPENSE, DEPOSITS, MORTGAGE, CAPITAL,
    RENT, LATE_FEES, REPAIRS, UTILITIES, INTEREST, PARKING,
]

# (debit account, credit account, source tag): tags follow the write path's
# conventions so that cash presentation is exact.
JOURNAL_KINDS = [
    (BANK, RENT, "rent_payment"),
    (RECEIVABLE, RENT, None),
    (BANK, RECEIVABLE, "rent_payment"),
    (BANK, LATE_FEES, "late_fee"),
    (REPAIRS, BANK, "expense"),
    (UTILITIES, BANK, "expense"),
    (INTEREST, BANK, "expense"),
    (PARKING, BANK, "expense"),
    (BANK, CAPITAL, "special_transaction"),
    (CAPITAL, BANK, "special_transaction"),
    (BANK, DEPOSITS, "security_deposit"),
    (DEPOSITS, BANK, "security_deposit"),
    (BUILDING, MORTGAGE, None),
    (MORTGAGE, BANK, None),
    (SUSPENSE, CAPITAL, "adjustment"),
]

START = date(2026, 1, 1)

journals = st.lists(
    st.tuples(
        st.sampled_from(JOURNAL_KINDS),
        st.integers(min_value=1, max_value=10**9),
        st.integers(min_value=0, max_value=364),
    ),
    max_size=40,
)


def _metadata(report_type: ReportType) -> ReportMetadata:
    return ReportMetadata(
        report_type=report_type,
        business_id=UUID(int=1),
        entity_name="Invariant Rentals",
        currency_code="CAD",
        as_of_date=date(2026, 12, 31),
        generated_at="2026-12-31T00:00:00+00:00",
    )


def _postings(drawn):
    postings = []
    for (debit, credit, tag), amount, offset in drawn:
        day = START + timedelta(days=offset)
        postings.append(make_posting(debit, debit_cents=amount, posting_date=day, source_type=tag))
        postings.append(make_posting(credit, credit_cents=amount, posting_date=day, source_type=tag))
    return postings


class TestTrialBalanceInvariant:
    """TB must always balance: debits = credits."""

    @given(drawn=journals)
    @settings(max_examples=200)
    def test_tb_debits_equal_credits(self, drawn):
        tb = build_trial_balance(
            CHART, aggregate_postings(_postings(drawn)), _metadata(ReportType.TRIAL_BALANCE),
        )
        assert tb.total_debits_cents == tb.total_credits_cents
        assert tb.is_balanced is True

    @given(drawn=journals)
    @settings(max_examples=100)
    def test_rows_have_one_side(self, drawn):
        tb = build_trial_balance(
            CHART, aggregate_postings(_postings(drawn)), _metadata(ReportType.TRIAL_BALANCE),
        )
        for line in tb.lines:
            assert line.debit_balance_cents >= 0
            assert line.credit_balance_cents >= 0
            assert line.debit_balance_cents == 0 or line.credit_balance_cents == 0
            assert line.debit_balance_cents + line.credit_balance_cents > 0


class TestStatementInvariants:

    @given(drawn=journals)
    @settings(max_examples=200)
    def test_balance_sheet_equation(self, drawn):
        activity = aggregate_postings(_postings(drawn))
        income = build_income_statement(
            CHART, activity, _metadata(ReportType.INCOME_STATEMENT), DEFAULT_CLASSIFICATION_TABLE,
        )
        bs = build_balance_sheet(
            CHART, activity, _metadata(ReportType.BALANCE_SHEET), DEFAULT_CLASSIFICATION_TABLE,
            current_year_earnings_cents=income.net_income_cents,
        )
        assert bs.total_assets_cents == bs.total_liabilities_and_equity_cents
        assert bs.imbalance_cents == 0
        assert bs.is_balanced is True

    @given(drawn=journals)
    @settings(max_examples=200)
    def test_income_statement_identities(self, drawn):
        inc = build_income_statement(
            CHART,
            aggregate_postings(_postings(drawn)),
            _metadata(ReportType.INCOME_STATEMENT),
            DEFAULT_CLASSIFICATION_TABLE,
        )
        assert inc.net_income_cents == inc.total_revenue_cents - inc.total_expenses_cents
        assert inc.total_expenses_cents == (
            inc.operating_expenses.total_cents + inc.other_expenses.total_cents
        )
        assert inc.expenses.total_cents == inc.total_expenses_cents
        for section in (inc.revenue, inc.operating_expenses, inc.other_expenses):
            assert section.total_cents == sum(s.total_cents for s in section.subsections)
            assert section.total_cents == sum(l.amount_cents for l in section.lines)

    @given(drawn=journals, split=st.integers(min_value=0, max_value=364))
    @settings(max_examples=200)
    def test_cash_flow_reconciles(self, drawn, split):
        start = START + timedelta(days=split)
        postings = [p for p in _postings(drawn) if p.account_id == BANK.account_id]
        before = [p for p in postings if p.posting_date < start]
        window = [p for p in postings if p.posting_date >= start]

        def cash(ps):
            return sum(p.debit_cents - p.credit_cents for p in ps)

        cf = build_cash_flow_statement(
            window,
            _metadata(ReportType.CASH_FLOW),
            opening_cash_cents=cash(before),
            closing_cash_cents=cash(postings),
        )
        assert cf.cash_change_reconciles is True
        assert cf.closing_cash_cents == cf.opening_cash_cents + cf.net_change_cents


class TestComparisonWindowProperties:

    @given(
        start=st.dates(min_value=date(2001, 1, 1), max_value=date(2090, 12, 31)),
        length=st.integers(min_value=0, max_value=800),
    )
    def test_prior_period_is_adjacent_and_equal_length(self, start, length):
        end = start + timedelta(days=length)
        prior_start, prior_end = prior_period_window(start, end)
        assert prior_end == start - timedelta(days=1)
        assert prior_end - prior_start == end - start

    @given(value=st.dates(min_value=date(2001, 1, 1), max_value=date(2090, 12, 31)))
    def test_shift_years_keeps_month(self, value):
        shifted = shift_years(value, -1)
        assert shifted.year == value.year - 1
        assert shifted.month == value.month
        assert shifted.day in (value.day, 28)
