"""
Module: rentbook_kernel.selectors.ledger_selector
Responsibility: Read-only ledger queries: posted lines for a business over an
    as-of or activity window, optionally property-scoped, plus the read-time
    verification that every journal balances.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - No stored balances are consulted.  Every figure the engine reports is
      summed from the PostingRecords returned here.
    - Shape normalisation: stored rows become canonical PostingRecords
      (``transaction_date`` -> ``posting_date``; posting source tag, else the
      journal's tag).

Failure modes:
    - DataAccessError on any query failure (no retry; reads are idempotent so
      the caller may retry).
    - ValueError when both ``as_of_date`` and ``end_date`` are given.
"""

from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rentbook_kernel.domain.records import PostingRecord
from rentbook_kernel.logging_config import get_logger
from rentbook_kernel.models.journal import Journal, LedgerPosting
from rentbook_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


class LedgerSelector(BaseSelector[LedgerPosting]):
    """
    Ledger Reader -- the authoritative source of posted amounts.

    Contract:
        ``as_of_date`` / ``end_date`` are inclusive upper bounds,
        ``start_date`` is an inclusive lower bound and ``before_date`` an
        exclusive upper bound.  Results are ordered by posting date, then
        journal, then row id, so repeated reads of an unchanged ledger return
        identical lists.

    Non-goals:
        - No snapshot isolation beyond what the caller's session provides.
        - No currency conversion; amounts are reporting-currency cents.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def list_postings(
        self,
        business_id: UUID,
        *,
        as_of_date: date | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        before_date: date | None = None,
        property_id: UUID | None = None,
        account_ids: Iterable[UUID] | None = None,
    ) -> list[PostingRecord]:
        """
        List posted ledger lines for a business.

        Args:
            business_id: Owning business.
            as_of_date: Cumulative cutoff (inclusive).
            start_date: Activity window start (inclusive).
            end_date: Activity window end (inclusive).
            before_date: Cumulative cutoff (exclusive).
            property_id: Restrict to lines tagged with this property.
            account_ids: Restrict to these accounts.

        Returns:
            Canonical PostingRecords.
        """
        if as_of_date is not None and end_date is not None:
            raise ValueError("Pass either as_of_date or end_date, not both")
        upper = as_of_date if as_of_date is not None else end_date

        query = (
            select(
                LedgerPosting.id,
                LedgerPosting.account_id,
                LedgerPosting.journal_id,
                LedgerPosting.transaction_date,
                LedgerPosting.debit_cents,
                LedgerPosting.credit_cents,
                LedgerPosting.property_id,
                LedgerPosting.source_type,
                Journal.source_type.label("journal_source_type"),
            )
            .outerjoin(Journal, LedgerPosting.journal_id == Journal.id)
            .where(LedgerPosting.business_id == business_id)
        )

        if upper is not None:
            query = query.where(LedgerPosting.transaction_date <= upper)
        if start_date is not None:
            query = query.where(LedgerPosting.transaction_date >= start_date)
        if before_date is not None:
            query = query.where(LedgerPosting.transaction_date < before_date)
        if property_id is not None:
            query = query.where(LedgerPosting.property_id == property_id)
        if account_ids is not None:
            ids = list(account_ids)
            if not ids:
                return []
            query = query.where(LedgerPosting.account_id.in_(ids))

        query = query.order_by(
            LedgerPosting.transaction_date,
            LedgerPosting.journal_id,
            LedgerPosting.id,
        )

        rows = self._execute("list_postings", business_id, query)
        postings = [self._to_record(row) for row in rows]

        logger.debug(
            "postings_loaded",
            extra={
                "business_id": str(business_id),
                "posting_count": len(postings),
                "start_date": start_date,
                "end_date": upper,
                "before_date": before_date,
                "property_id": str(property_id) if property_id else None,
            },
        )
        return postings

    def unbalanced_journals(
        self,
        business_id: UUID,
        *,
        as_of_date: date | None = None,
        property_id: UUID | None = None,
    ) -> list[UUID]:
        """
        Return journals whose own debits and credits differ.

        A journal is in scope when at least one of its lines falls inside the
        window (and property, if given); its balance is then checked over all
        of its lines, so property scoping alone never flags a journal.

        Returns:
            Journal ids, sorted.
        """
        in_scope = select(LedgerPosting.journal_id).where(
            LedgerPosting.business_id == business_id,
        )
        if as_of_date is not None:
            in_scope = in_scope.where(LedgerPosting.transaction_date <= as_of_date)
        if property_id is not None:
            in_scope = in_scope.where(LedgerPosting.property_id == property_id)

        query = (
            select(LedgerPosting.journal_id)
            .where(
                LedgerPosting.business_id == business_id,
                LedgerPosting.journal_id.in_(in_scope.distinct()),
            )
            .group_by(LedgerPosting.journal_id)
            .having(
                func.sum(LedgerPosting.debit_cents)
                != func.sum(LedgerPosting.credit_cents)
            )
        )

        rows = self._execute("unbalanced_journals", business_id, query)
        journal_ids = sorted((row.journal_id for row in rows), key=str)

        if journal_ids:
            logger.warning(
                "unbalanced_journals_detected",
                extra={
                    "business_id": str(business_id),
                    "journal_count": len(journal_ids),
                },
            )
        return journal_ids

    @staticmethod
    def _to_record(row) -> PostingRecord:
        return PostingRecord(
            account_id=row.account_id,
            journal_id=row.journal_id,
            debit_cents=int(row.debit_cents or 0),
            credit_cents=int(row.credit_cents or 0),
            posting_date=row.transaction_date,
            property_id=row.property_id,
            source_type=row.source_type or row.journal_source_type,
        )
