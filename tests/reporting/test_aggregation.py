"""
Balance aggregation tests.

NO database, NO I/O.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from rentbook_kernel.models.account import AccountType, NormalBalance
from rentbook_modules.reporting.aggregation import (
    EMPTY_ACTIVITY,
    AccountActivity,
    aggregate_postings,
    debit_normal_total,
    natural_amount,
    split_by_normal_balance,
)

from tests.reporting.conftest import make_account_info, make_posting


class TestAggregatePostings:

    def test_empty(self):
        assert aggregate_postings([]) == {}

    def test_sums_per_account(self):
        bank = make_account_info("1000", "Bank", AccountType.ASSET)
        rent = make_account_info("4000", "Rent Income", AccountType.REVENUE)
        postings = [
            make_posting(bank, debit_cents=150000),
            make_posting(rent, credit_cents=150000),
            make_posting(bank, credit_cents=20000),
        ]

        activity = aggregate_postings(postings)

        assert activity[bank.account_id] == AccountActivity(150000, 20000)
        assert activity[rent.account_id] == AccountActivity(0, 150000)

    def test_accepts_generator(self):
        bank = make_account_info("1000", "Bank", AccountType.ASSET)
        activity = aggregate_postings(
            make_posting(bank, debit_cents=n) for n in (1, 2, 3)
        )
        assert activity[bank.account_id].debits_cents == 6


class TestAccountActivity:

    def test_net_is_debits_minus_credits(self):
        assert AccountActivity(500, 800).net_cents == -300

    def test_empty(self):
        assert EMPTY_ACTIVITY.is_empty is True
        assert AccountActivity(1, 0).is_empty is False


class TestSplitByNormalBalance:

    @pytest.mark.parametrize(
        "net, normal, expected",
        [
            (500, NormalBalance.DEBIT, (500, 0)),
            (-500, NormalBalance.DEBIT, (0, 500)),
            (0, NormalBalance.DEBIT, (0, 0)),
            (-500, NormalBalance.CREDIT, (0, 500)),
            (500, NormalBalance.CREDIT, (500, 0)),
            (0, NormalBalance.CREDIT, (0, 0)),
        ],
    )
    def test_split(self, net, normal, expected):
        assert split_by_normal_balance(net, normal) == expected


class TestNaturalAmount:

    def test_debit_normal(self):
        assert natural_amount(AccountActivity(900, 100), NormalBalance.DEBIT) == 800

    def test_credit_normal(self):
        assert natural_amount(AccountActivity(100, 900), NormalBalance.CREDIT) == 800

    def test_contra_balance_is_negative(self):
        assert natural_amount(AccountActivity(900, 100), NormalBalance.CREDIT) == -800


class TestDebitNormalTotal:

    def test_sums_only_requested_accounts(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        activity = {
            a: AccountActivity(1000, 200),
            b: AccountActivity(0, 300),
            c: AccountActivity(99999, 0),
        }
        assert debit_normal_total(activity, [a, b]) == 500

    def test_missing_account_counts_zero(self):
        assert debit_normal_total({}, [uuid4()]) == 0
