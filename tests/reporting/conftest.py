"""
Reporting-specific test fixtures.

Provides:
- ReportingService instances
- The worked scenario ledger (bank, rent income, repairs)
- Helper factories for pure function tests
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4

import pytest

from rentbook_kernel.domain.records import AccountInfo, PostingRecord
from rentbook_kernel.models.account import AccountType, GLAccount, NormalBalance
from rentbook_modules.reporting.config import ReportingConfig
from rentbook_modules.reporting.service import ReportingService

from tests.conftest import TEST_YEAR


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig.with_defaults()


@pytest.fixture
def reporting_service(
    session,
    deterministic_clock,
    reporting_config,
) -> ReportingService:
    """ReportingService wired to the test session."""
    return ReportingService(
        session=session,
        clock=deterministic_clock,
        config=reporting_config,
    )


@dataclass
class WorkedScenario:
    bank: GLAccount
    rent: GLAccount
    repairs: GLAccount


@pytest.fixture
def worked_scenario(ledger) -> WorkedScenario:
    """
    Bank 1000, Rent Income 4000, Repairs 5100.

    Rent of 1,500.00 received on Mar 1 and a 200.00 repair paid on Mar 15.
    """
    bank = ledger.account("1000", "Bank", AccountType.ASSET, is_bank_account=True)
    rent = ledger.account("4000", "Rent Income", AccountType.REVENUE)
    repairs = ledger.account("5100", "Repairs", AccountType.EXPENSE)
    ledger.post(date(TEST_YEAR, 3, 1), bank, rent, 150000, source_type="rent_payment")
    ledger.post(date(TEST_YEAR, 3, 15), repairs, bank, 20000, source_type="expense")
    return WorkedScenario(bank=bank, rent=rent, repairs=repairs)


# =========================================================================
# Synthetic data for pure function tests (no DB required)
# =========================================================================


_NORMAL_FOR_TYPE = {
    AccountType.ASSET: NormalBalance.DEBIT,
    AccountType.EXPENSE: NormalBalance.DEBIT,
    AccountType.LIABILITY: NormalBalance.CREDIT,
    AccountType.EQUITY: NormalBalance.CREDIT,
    AccountType.REVENUE: NormalBalance.CREDIT,
}


def make_account_info(
    number: str,
    name: str,
    account_type: AccountType,
    normal_balance: NormalBalance | None = None,
    account_id: UUID | None = None,
    **flags,
) -> AccountInfo:
    """Factory for AccountInfo used in pure tests."""
    return AccountInfo(
        account_id=account_id or uuid4(),
        account_number=number,
        account_name=name,
        account_type=account_type,
        normal_balance=normal_balance or _NORMAL_FOR_TYPE[account_type],
        **flags,
    )


def make_posting(
    account: AccountInfo,
    debit_cents: int = 0,
    credit_cents: int = 0,
    posting_date: date = date(TEST_YEAR, 1, 15),
    source_type: str | None = None,
    property_id: UUID | None = None,
) -> PostingRecord:
    """Factory for PostingRecord used in pure tests."""
    return PostingRecord(
        account_id=account.account_id,
        debit_cents=debit_cents,
        credit_cents=credit_cents,
        posting_date=posting_date,
        source_type=source_type,
        property_id=property_id,
    )
