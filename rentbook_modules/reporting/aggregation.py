"""
Pure balance aggregation over canonical posting records.

ZERO I/O. ZERO side effects.  The window (as-of cutoff or activity range,
property scope) is chosen by the caller when it reads the postings; this
module only sums what it is given.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from rentbook_kernel.domain.records import PostingRecord
from rentbook_kernel.models.account import NormalBalance


@dataclass(frozen=True)
class AccountActivity:
    """Plain debit and credit sums for one account."""

    debits_cents: int = 0
    credits_cents: int = 0

    @property
    def net_cents(self) -> int:
        """Raw debits - credits (no sign normalisation)."""
        return self.debits_cents - self.credits_cents

    @property
    def is_empty(self) -> bool:
        return self.debits_cents == 0 and self.credits_cents == 0


EMPTY_ACTIVITY = AccountActivity()


def aggregate_postings(
    postings: Iterable[PostingRecord],
) -> dict[UUID, AccountActivity]:
    """Sum debits and credits per account."""
    debits: dict[UUID, int] = {}
    credits: dict[UUID, int] = {}
    for posting in postings:
        debits[posting.account_id] = (
            debits.get(posting.account_id, 0) + posting.debit_cents
        )
        credits[posting.account_id] = (
            credits.get(posting.account_id, 0) + posting.credit_cents
        )
    return {
        account_id: AccountActivity(debits[account_id], credits[account_id])
        for account_id in debits
    }


def split_by_normal_balance(
    net_cents: int,
    normal_balance: NormalBalance,
) -> tuple[int, int]:
    """
    Split a raw net (debits - credits) into (debit_balance, credit_balance).

    Debit-normal: net >= 0 is a debit balance, else a credit balance of -net.
    Credit-normal: net <= 0 is a credit balance of -net, else a debit balance.
    Both rules put a positive net on the debit side and a negative net on the
    credit side; they differ only in which side a zero lands on, and a zero
    is zero either way.
    """
    if normal_balance == NormalBalance.DEBIT:
        if net_cents >= 0:
            return net_cents, 0
        return 0, -net_cents
    if net_cents <= 0:
        return 0, -net_cents
    return net_cents, 0


def natural_amount(
    activity: AccountActivity,
    normal_balance: NormalBalance,
) -> int:
    """
    Balance in the account's natural direction.

    DEBIT-normal (ASSET, EXPENSE): debits - credits
    CREDIT-normal (LIABILITY, EQUITY, REVENUE): credits - debits
    """
    if normal_balance == NormalBalance.DEBIT:
        return activity.net_cents
    return -activity.net_cents


def debit_normal_total(
    activity: dict[UUID, AccountActivity],
    account_ids: Iterable[UUID],
) -> int:
    """Sum of debits - credits over the given accounts (e.g. cash)."""
    return sum(
        activity.get(account_id, EMPTY_ACTIVITY).net_cents
        for account_id in account_ids
    )
