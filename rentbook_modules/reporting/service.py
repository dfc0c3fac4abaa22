"""
Reporting Module Service (``rentbook_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation -- trial balance, balance sheet, income
statement, simplified cash flow statement and property comparison -- by
bridging the kernel selectors (``LedgerSelector``, ``AccountSelector``) to
the pure transformation functions in ``statements.py``.  This is a
**read-only** service: nothing is posted, nothing is committed.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReportingService`` is the sole public
entry point for report generation.  Constructor: ``session`` + ``clock`` +
``config``; no module-level clients or sessions.

Comparisons
-----------
Each statement has a ``compute_*`` primitive whose signature cannot ask for
a comparison, and a ``generate_*`` wrapper that calls the primitive for the
requested window and again for each comparison window.  Comparison depth is
therefore one by construction.  Calls are sequential.

Invariants enforced
-------------------
* Read-only -- no mutations to the ledger or chart of accounts.
* Every reported figure is summed from ledger postings; cached account
  balances are never used.
* Reports reflect whatever the caller's session sees; no snapshot isolation
  is added.

Failure modes
-------------
* Selector query failure  -> ``DataAccessError`` propagates; no partial
  report is returned.  No retry (reads are idempotent; the caller may retry).
* ``start_date > end_date``  -> ``InvalidReportPeriodError`` before any query.
* Ledger imbalance, failed cash reconciliation, classification gaps  ->
  reported on the returned object and logged as warnings, never raised.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from rentbook_kernel.domain.clock import Clock, SystemClock
from rentbook_kernel.domain.records import AccountInfo
from rentbook_kernel.exceptions import InvalidReportPeriodError
from rentbook_kernel.logging_config import LogContext, get_logger
from rentbook_kernel.selectors.account_selector import AccountSelector
from rentbook_kernel.selectors.ledger_selector import LedgerSelector

from rentbook_modules.reporting.aggregation import (
    AccountActivity,
    aggregate_postings,
    debit_normal_total,
)
from rentbook_modules.reporting.classification import (
    ClassificationGap,
    find_classification_gaps,
)
from rentbook_modules.reporting.comparison import (
    prior_period_window,
    prior_year_window,
    shift_years,
    year_start,
)
from rentbook_modules.reporting.config import ReportingConfig
from rentbook_modules.reporting.models import (
    BalanceSheet,
    CashFlowStatement,
    IncomeStatement,
    PropertyComparisonRow,
    ReportMetadata,
    ReportType,
    TrialBalance,
)
from rentbook_modules.reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_income_statement,
    build_property_comparison_row,
    build_trial_balance,
    render_to_dict,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Financial report generation service.

    Contract
    --------
    * Every public method returns a frozen report object.
    * All methods are **read-only** -- no mutations to the database.
    * Identical arguments against an unchanged ledger return equal reports
      (``generated_at`` is excluded from equality).

    Guarantees
    ----------
    * Report generation delegates to pure transformation functions in
      ``statements.py``; no financial logic lives in this class.
    * Clock is injectable for deterministic testing.
    * All monetary amounts are integer cents.

    Non-goals
    ---------
    * Does NOT validate postings at write time.
    * Does NOT translate currencies; one reporting currency per config.
    * Does NOT parallelise comparison reads.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._ledger = LedgerSelector(session)
        self._accounts = AccountSelector(session)

        logger.info(
            "reporting_service_initialized",
            extra={
                "entity_name": self._config.entity_name,
                "currency_code": self._config.currency_code,
                "classification_version": self._config.classification.version,
            },
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _load_accounts(self, business_id: UUID) -> list[AccountInfo]:
        """Active leaf accounts -- the only accounts any statement reports."""
        return self._accounts.list_accounts(
            business_id, is_active=True, is_header_account=False,
        )

    def _cumulative_activity(
        self,
        business_id: UUID,
        as_of_date: date,
        property_id: UUID | None,
    ) -> dict[UUID, AccountActivity]:
        return aggregate_postings(
            self._ledger.list_postings(
                business_id, as_of_date=as_of_date, property_id=property_id,
            )
        )

    def _window_activity(
        self,
        business_id: UUID,
        start_date: date,
        end_date: date,
        property_id: UUID | None,
    ) -> dict[UUID, AccountActivity]:
        return aggregate_postings(
            self._ledger.list_postings(
                business_id,
                start_date=start_date,
                end_date=end_date,
                property_id=property_id,
            )
        )

    def _build_metadata(
        self,
        report_type: ReportType,
        business_id: UUID,
        as_of_date: date,
        period_start: date | None = None,
        period_end: date | None = None,
        property_id: UUID | None = None,
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            report_type=report_type,
            business_id=business_id,
            entity_name=self._config.entity_name,
            currency_code=self._config.currency_code,
            as_of_date=as_of_date,
            generated_at=self._clock.stamp(),
            period_start=period_start,
            period_end=period_end,
            property_id=property_id,
            classification_version=self._config.classification.version,
        )

    @staticmethod
    def _check_period(start_date: date, end_date: date) -> None:
        if start_date > end_date:
            raise InvalidReportPeriodError(
                start_date.isoformat(), end_date.isoformat(),
            )

    @staticmethod
    def _warn_gaps(gaps: Iterable[ClassificationGap]) -> None:
        for gap in gaps:
            logger.warning(
                "classification_gap",
                extra={
                    "account_id": str(gap.account_id),
                    "account_number": gap.account_number,
                    "account_type": gap.account_type.value,
                    "reason": gap.reason,
                },
            )

    # =========================================================================
    # Trial balance
    # =========================================================================

    def generate_trial_balance(
        self,
        business_id: UUID,
        as_of_date: date,
        *,
        property_id: UUID | None = None,
        include_zero_balances: bool | None = None,
    ) -> TrialBalance:
        """
        Generate a trial balance as of a date.

        Args:
            business_id: Business whose ledger is reported.
            as_of_date: Inclusive cutoff.
            property_id: Restrict to postings tagged with this property.
            include_zero_balances: Keep rows whose balances are both zero
                (defaults to the config setting).

        Returns:
            TrialBalance; check ``is_balanced``.
        """
        include_zero = (
            self._config.include_zero_balances
            if include_zero_balances is None
            else include_zero_balances
        )
        with LogContext.bind(
            business_id=business_id,
            property_id=property_id,
            report_type=ReportType.TRIAL_BALANCE.value,
        ):
            accounts = self._load_accounts(business_id)
            activity = self._cumulative_activity(business_id, as_of_date, property_id)
            unbalanced = self._ledger.unbalanced_journals(
                business_id, as_of_date=as_of_date, property_id=property_id,
            )

            metadata = self._build_metadata(
                ReportType.TRIAL_BALANCE,
                business_id,
                as_of_date,
                property_id=property_id,
            )
            report = build_trial_balance(
                accounts,
                activity,
                metadata,
                include_zero_balances=include_zero,
                unbalanced_journal_ids=unbalanced,
            )

            if not report.is_balanced:
                logger.warning(
                    "trial_balance_imbalance_detected",
                    extra={
                        "as_of_date": as_of_date.isoformat(),
                        "total_debits_cents": report.total_debits_cents,
                        "total_credits_cents": report.total_credits_cents,
                        "imbalance_cents": report.imbalance_cents,
                        "unbalanced_journal_count": len(unbalanced),
                    },
                )

            logger.info(
                "trial_balance_generated",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "line_count": len(report.lines),
                    "total_debits_cents": report.total_debits_cents,
                    "total_credits_cents": report.total_credits_cents,
                    "is_balanced": report.is_balanced,
                },
            )
            return report

    # =========================================================================
    # Balance sheet
    # =========================================================================

    def compute_balance_sheet(
        self,
        business_id: UUID,
        as_of_date: date,
        *,
        property_id: UUID | None = None,
    ) -> BalanceSheet:
        """
        Balance sheet primitive: one as-of date, no comparison.

        Current-year earnings are the net income of an income statement over
        [Jan 1 of the as-of year, as-of date] with the same property scope.
        Income of earlier years is expected to have been closed into equity
        by the write path; unclosed prior-year income shows as imbalance.
        """
        accounts = self._load_accounts(business_id)
        activity = self._cumulative_activity(business_id, as_of_date, property_id)
        earnings = self.compute_income_statement(
            business_id,
            year_start(as_of_date),
            as_of_date,
            property_id=property_id,
        )

        metadata = self._build_metadata(
            ReportType.BALANCE_SHEET,
            business_id,
            as_of_date,
            property_id=property_id,
        )
        report = build_balance_sheet(
            accounts,
            activity,
            metadata,
            self._config.classification,
            current_year_earnings_cents=earnings.net_income_cents,
            earnings_account_number=self._config.current_earnings_account_number,
            earnings_account_name=self._config.current_earnings_account_name,
            balance_tolerance_cents=self._config.balance_tolerance_cents,
        )

        self._warn_gaps(report.classification_gaps)
        if not report.is_balanced:
            logger.warning(
                "balance_sheet_imbalance_detected",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "total_assets_cents": report.total_assets_cents,
                    "total_liabilities_and_equity_cents": (
                        report.total_liabilities_and_equity_cents
                    ),
                    "imbalance_cents": report.imbalance_cents,
                    "tolerance_cents": self._config.balance_tolerance_cents,
                },
            )
        return report

    def generate_balance_sheet(
        self,
        business_id: UUID,
        as_of_date: date,
        *,
        property_id: UUID | None = None,
        compare_prior_year: bool = False,
    ) -> BalanceSheet:
        """
        Generate a classified balance sheet.

        Args:
            business_id: Business whose ledger is reported.
            as_of_date: Inclusive cutoff.
            property_id: Restrict to postings tagged with this property.
            compare_prior_year: Attach the balance sheet as of the same date
                one year earlier (Feb 29 -> Feb 28).

        Returns:
            BalanceSheet; check ``is_balanced``.
        """
        with LogContext.bind(
            business_id=business_id,
            property_id=property_id,
            report_type=ReportType.BALANCE_SHEET.value,
        ):
            report = self.compute_balance_sheet(
                business_id, as_of_date, property_id=property_id,
            )
            if compare_prior_year:
                prior = self.compute_balance_sheet(
                    business_id,
                    shift_years(as_of_date, -1),
                    property_id=property_id,
                )
                report = dataclasses.replace(report, prior_year=prior)

            logger.info(
                "balance_sheet_generated",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "total_assets_cents": report.total_assets_cents,
                    "total_liabilities_and_equity_cents": (
                        report.total_liabilities_and_equity_cents
                    ),
                    "is_balanced": report.is_balanced,
                    "compare_prior_year": compare_prior_year,
                },
            )
            return report

    # =========================================================================
    # Income statement
    # =========================================================================

    def compute_income_statement(
        self,
        business_id: UUID,
        start_date: date,
        end_date: date,
        *,
        property_id: UUID | None = None,
    ) -> IncomeStatement:
        """Income statement primitive: one window, no comparison."""
        self._check_period(start_date, end_date)
        accounts = self._load_accounts(business_id)
        activity = self._window_activity(
            business_id, start_date, end_date, property_id,
        )

        metadata = self._build_metadata(
            ReportType.INCOME_STATEMENT,
            business_id,
            end_date,
            period_start=start_date,
            period_end=end_date,
            property_id=property_id,
        )
        report = build_income_statement(
            accounts, activity, metadata, self._config.classification,
        )
        self._warn_gaps(report.classification_gaps)
        return report

    def generate_income_statement(
        self,
        business_id: UUID,
        start_date: date,
        end_date: date,
        *,
        property_id: UUID | None = None,
        compare_prior_period: bool = False,
        compare_prior_year: bool = False,
    ) -> IncomeStatement:
        """
        Generate an income statement (P&L) over [start_date, end_date].

        Args:
            business_id: Business whose ledger is reported.
            start_date: Window start (inclusive).
            end_date: Window end (inclusive).
            property_id: Restrict to postings tagged with this property.
            compare_prior_period: Attach the statement for the window of
                equal length ending the day before ``start_date``.
            compare_prior_year: Attach the statement for the same window one
                year earlier.

        Raises:
            InvalidReportPeriodError: ``start_date`` is after ``end_date``.
        """
        self._check_period(start_date, end_date)
        with LogContext.bind(
            business_id=business_id,
            property_id=property_id,
            report_type=ReportType.INCOME_STATEMENT.value,
        ):
            report = self.compute_income_statement(
                business_id, start_date, end_date, property_id=property_id,
            )

            prior_period = None
            if compare_prior_period:
                prior_start, prior_end = prior_period_window(start_date, end_date)
                prior_period = self.compute_income_statement(
                    business_id, prior_start, prior_end, property_id=property_id,
                )

            prior_year = None
            if compare_prior_year:
                prior_start, prior_end = prior_year_window(start_date, end_date)
                prior_year = self.compute_income_statement(
                    business_id, prior_start, prior_end, property_id=property_id,
                )

            if prior_period is not None or prior_year is not None:
                report = dataclasses.replace(
                    report, prior_period=prior_period, prior_year=prior_year,
                )

            logger.info(
                "income_statement_generated",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "total_revenue_cents": report.total_revenue_cents,
                    "total_expenses_cents": report.total_expenses_cents,
                    "net_income_cents": report.net_income_cents,
                    "compare_prior_period": compare_prior_period,
                    "compare_prior_year": compare_prior_year,
                },
            )
            return report

    # =========================================================================
    # Cash flow statement
    # =========================================================================

    def generate_cash_flow_statement(
        self,
        business_id: UUID,
        start_date: date,
        end_date: date,
        *,
        property_id: UUID | None = None,
    ) -> CashFlowStatement:
        """
        Generate a simplified direct-method cash flow statement.

        Cash accounts are the active leaf accounts flagged as bank accounts.
        Opening cash is their balance strictly before ``start_date``;
        closing cash is their balance through ``end_date``.  The property
        filter applies to balances and activity alike.

        Raises:
            InvalidReportPeriodError: ``start_date`` is after ``end_date``.
        """
        self._check_period(start_date, end_date)
        with LogContext.bind(
            business_id=business_id,
            property_id=property_id,
            report_type=ReportType.CASH_FLOW.value,
        ):
            cash_ids = [
                bank.account_id
                for bank in self._accounts.list_bank_accounts(business_id)
            ]

            opening = debit_normal_total(
                aggregate_postings(
                    self._ledger.list_postings(
                        business_id,
                        before_date=start_date,
                        property_id=property_id,
                        account_ids=cash_ids,
                    )
                ),
                cash_ids,
            )
            closing = debit_normal_total(
                aggregate_postings(
                    self._ledger.list_postings(
                        business_id,
                        as_of_date=end_date,
                        property_id=property_id,
                        account_ids=cash_ids,
                    )
                ),
                cash_ids,
            )
            window = self._ledger.list_postings(
                business_id,
                start_date=start_date,
                end_date=end_date,
                property_id=property_id,
                account_ids=cash_ids,
            )

            metadata = self._build_metadata(
                ReportType.CASH_FLOW,
                business_id,
                end_date,
                period_start=start_date,
                period_end=end_date,
                property_id=property_id,
            )
            report = build_cash_flow_statement(
                window,
                metadata,
                opening_cash_cents=opening,
                closing_cash_cents=closing,
            )

            if not report.cash_change_reconciles:
                logger.warning(
                    "cash_flow_reconciliation_failed",
                    extra={
                        "opening_cash_cents": opening,
                        "closing_cash_cents": closing,
                        "net_change_cents": report.net_change_cents,
                        "difference_cents": (
                            closing - opening - report.net_change_cents
                        ),
                    },
                )

            logger.info(
                "cash_flow_statement_generated",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "cash_account_count": len(cash_ids),
                    "net_change_cents": report.net_change_cents,
                    "cash_change_reconciles": report.cash_change_reconciles,
                },
            )
            return report

    # =========================================================================
    # Property reports
    # =========================================================================

    def generate_property_pl(
        self,
        business_id: UUID,
        property_id: UUID,
        start_date: date,
        end_date: date,
    ) -> IncomeStatement:
        """Income statement scoped to one property."""
        return self.generate_income_statement(
            business_id, start_date, end_date, property_id=property_id,
        )

    def generate_property_comparison(
        self,
        business_id: UUID,
        property_ids: Iterable[UUID],
        start_date: date,
        end_date: date,
    ) -> tuple[PropertyComparisonRow, ...]:
        """
        One income statement per property over the same window, tabulated.

        Rows follow the order of ``property_ids``.

        Raises:
            InvalidReportPeriodError: ``start_date`` is after ``end_date``.
        """
        self._check_period(start_date, end_date)
        with LogContext.bind(
            business_id=business_id,
            report_type=ReportType.PROPERTY_COMPARISON.value,
        ):
            rows = tuple(
                build_property_comparison_row(
                    property_id,
                    self.compute_income_statement(
                        business_id, start_date, end_date, property_id=property_id,
                    ),
                )
                for property_id in property_ids
            )

            logger.info(
                "property_comparison_generated",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "property_count": len(rows),
                },
            )
            return rows

    # =========================================================================
    # Chart validation and rendering
    # =========================================================================

    def validate_chart(self, business_id: UUID) -> tuple[ClassificationGap, ...]:
        """
        Check the live chart of accounts against the classification table.

        Returns every active leaf account the table cannot place; an empty
        tuple means every account lands in a configured subsection.
        """
        with LogContext.bind(business_id=business_id):
            gaps = find_classification_gaps(
                self._load_accounts(business_id), self._config.classification,
            )
            self._warn_gaps(gaps)
            logger.info(
                "chart_validated",
                extra={
                    "classification_version": self._config.classification.version,
                    "gap_count": len(gaps),
                },
            )
            return gaps

    def to_dict(self, report: object) -> dict:
        """Render any report to plain JSON-safe data."""
        return render_to_dict(report)
