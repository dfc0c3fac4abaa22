"""
Ledger Reader tests.

Verifies:
- Window filters: as-of (inclusive), start/end (inclusive), before (exclusive).
- Property and account scoping.
- Shape normalisation: posting source tag, else journal tag.
- Read-time journal balance verification.
- Driver failures surface as DataAccessError.
"""

from datetime import date
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from rentbook_kernel.exceptions import DataAccessError
from rentbook_kernel.models.account import AccountType
from rentbook_kernel.models.journal import LedgerPosting
from rentbook_kernel.selectors.ledger_selector import LedgerSelector


@pytest.fixture
def selector(session):
    return LedgerSelector(session)


@pytest.fixture
def accounts(ledger):
    bank = ledger.account("1000", "Bank", AccountType.ASSET, is_bank_account=True)
    rent = ledger.account("4000", "Rent Income", AccountType.REVENUE)
    return bank, rent


class TestListPostings:

    def test_empty_ledger(self, selector, business_id):
        assert selector.list_postings(business_id) == []

    def test_records_carry_amounts_and_dates(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        journal = ledger.post(date(2026, 2, 1), bank, rent, 150000)

        postings = selector.list_postings(business_id)

        assert len(postings) == 2
        by_account = {p.account_id: p for p in postings}
        assert by_account[bank.id].debit_cents == 150000
        assert by_account[bank.id].credit_cents == 0
        assert by_account[rent.id].credit_cents == 150000
        assert all(p.posting_date == date(2026, 2, 1) for p in postings)
        assert all(p.journal_id == journal.id for p in postings)

    def test_ordered_by_posting_date(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 3, 1), bank, rent, 300)
        ledger.post(date(2026, 1, 1), bank, rent, 100)
        ledger.post(date(2026, 2, 1), bank, rent, 200)

        dates = [p.posting_date for p in selector.list_postings(business_id)]
        assert dates == sorted(dates)

    def test_as_of_is_inclusive(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 3, 31), bank, rent, 100)
        ledger.post(date(2026, 4, 1), bank, rent, 200)

        postings = selector.list_postings(business_id, as_of_date=date(2026, 3, 31))
        assert {p.posting_date for p in postings} == {date(2026, 3, 31)}

    def test_window_is_inclusive_both_ends(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        for day in (date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 31), date(2026, 4, 1)):
            ledger.post(day, bank, rent, 100)

        postings = selector.list_postings(
            business_id, start_date=date(2026, 3, 1), end_date=date(2026, 3, 31),
        )
        assert {p.posting_date for p in postings} == {date(2026, 3, 1), date(2026, 3, 31)}

    def test_before_is_exclusive(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 2, 28), bank, rent, 100)
        ledger.post(date(2026, 3, 1), bank, rent, 200)

        postings = selector.list_postings(business_id, before_date=date(2026, 3, 1))
        assert {p.posting_date for p in postings} == {date(2026, 2, 28)}

    def test_as_of_and_end_together_rejected(self, selector, business_id):
        with pytest.raises(ValueError):
            selector.list_postings(
                business_id, as_of_date=date(2026, 1, 1), end_date=date(2026, 1, 1),
            )

    def test_property_scope(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        p1, p2 = uuid4(), uuid4()
        ledger.post(date(2026, 1, 5), bank, rent, 100, property_id=p1)
        ledger.post(date(2026, 1, 6), bank, rent, 200, property_id=p2)
        ledger.post(date(2026, 1, 7), bank, rent, 400)

        postings = selector.list_postings(business_id, property_id=p1)
        assert len(postings) == 2
        assert all(p.property_id == p1 for p in postings)

    def test_account_scope(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)

        postings = selector.list_postings(business_id, account_ids=[bank.id])
        assert [p.account_id for p in postings] == [bank.id]

    def test_empty_account_scope_returns_nothing(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)
        assert selector.list_postings(business_id, account_ids=[]) == []

    def test_other_business_invisible(self, selector, ledger, accounts):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)
        assert selector.list_postings(uuid4()) == []


class TestSourceTagNormalisation:

    def test_journal_tag_used_when_posting_has_none(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100, source_type="rent_payment")

        tags = {p.source_type for p in selector.list_postings(business_id)}
        assert tags == {"rent_payment"}

    def test_posting_tag_wins_over_journal_tag(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.journal(
            date(2026, 1, 5),
            [(bank, 100, 0), (rent, 0, 100)],
            source_type="manual",
            posting_source_type="rent_payment",
        )

        tags = {p.source_type for p in selector.list_postings(business_id)}
        assert tags == {"rent_payment"}

    def test_untagged_rows_have_no_tag(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)

        tags = {p.source_type for p in selector.list_postings(business_id)}
        assert tags == {None}


class TestUnbalancedJournals:

    def test_balanced_ledger_has_none(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)
        assert selector.unbalanced_journals(business_id) == []

    def test_unbalanced_journal_flagged(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.post(date(2026, 1, 5), bank, rent, 100)
        bad = ledger.journal(date(2026, 1, 6), [(bank, 500, 0), (rent, 0, 499)])

        assert selector.unbalanced_journals(business_id) == [bad.id]

    def test_as_of_excludes_later_journals(self, selector, ledger, accounts, business_id):
        bank, rent = accounts
        ledger.journal(date(2026, 6, 1), [(bank, 500, 0), (rent, 0, 499)])

        assert selector.unbalanced_journals(business_id, as_of_date=date(2026, 5, 31)) == []

    def test_property_split_journal_not_flagged(self, selector, ledger, accounts, business_id, session):
        """A balanced journal whose lines span properties is checked over all lines."""
        bank, rent = accounts
        in_scope = uuid4()
        journal = ledger.post(date(2026, 1, 5), bank, rent, 100, property_id=in_scope)
        # Move the credit side to a second property.
        credit_line = session.scalars(
            select(LedgerPosting).where(
                LedgerPosting.journal_id == journal.id,
                LedgerPosting.credit_cents > 0,
            )
        ).one()
        credit_line.property_id = uuid4()
        session.flush()

        assert selector.unbalanced_journals(business_id, property_id=in_scope) == []

    def test_warning_logged(self, selector, ledger, accounts, business_id, captured_logs):
        bank, rent = accounts
        ledger.journal(date(2026, 1, 6), [(bank, 500, 0)])

        selector.unbalanced_journals(business_id)

        warnings = [r for r in captured_logs() if r["message"] == "unbalanced_journals_detected"]
        assert len(warnings) == 1
        assert warnings[0]["journal_count"] == 1


class TestFailureWrapping:

    def test_driver_error_becomes_data_access_error(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        biz = uuid4()

        with pytest.raises(DataAccessError) as exc_info:
            LedgerSelector(session).list_postings(biz)

        assert exc_info.value.operation == "list_postings"
        assert exc_info.value.business_id == str(biz)
        assert isinstance(exc_info.value.__cause__, OperationalError)
