"""
Account Classification Table (``rentbook_modules.reporting.classification``).

Responsibility
--------------
Maps an account (type + number) to a statement subsection through a named,
versioned table of half-open number ranges.  The table is data: it can be
inspected, loaded from YAML, validated on construction, and checked against
a live chart of accounts before any report is generated.

Architecture position
---------------------
**Modules layer** -- pure data and lookups, ZERO I/O except
``load_classification_table`` (file read).  Consumed by ``statements.py``
and by ``ReportingService.validate_chart``.

Invariants enforced
-------------------
* Every rule satisfies ``range_start < range_end``; a rule with no
  ``range_end`` covers every number from ``range_start`` up.
* Rules of one account type never overlap.
* A rule's subsection key belongs to its account type.
* Account numbers are read by their leading digits ("5100-01" is 5100).
* Lookup is total: an account outside every range for its type (or with no
  leading digits) maps to ``UNCLASSIFIED``, never to a guessed bucket.

Failure modes
-------------
* Malformed table  -> ``ClassificationTableError`` listing every problem.
* Missing YAML file -> ``FileNotFoundError`` propagates.
* Malformed YAML   -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from uuid import UUID

import yaml

from rentbook_kernel.domain.records import AccountInfo
from rentbook_kernel.exceptions import ClassificationTableError
from rentbook_kernel.logging_config import get_logger
from rentbook_kernel.models.account import AccountType

logger = get_logger("modules.reporting.classification")

UNCLASSIFIED = "unclassified"

# Subsection keys in presentation order, per account type.
SUBSECTION_KEYS: dict[AccountType, tuple[str, ...]] = {
    AccountType.ASSET: ("current_assets", "fixed_assets", "other_assets"),
    AccountType.LIABILITY: ("current_liabilities", "long_term_liabilities"),
    AccountType.EQUITY: ("equity",),
    AccountType.REVENUE: ("rental_income", "other_income"),
    AccountType.EXPENSE: (
        "repairs_maintenance",
        "utilities",
        "insurance_taxes",
        "administrative",
        "other_operating",
        "other_expenses",
    ),
}

SUBSECTION_TITLES: dict[str, str] = {
    "current_assets": "Current Assets",
    "fixed_assets": "Fixed Assets",
    "other_assets": "Other Assets",
    "current_liabilities": "Current Liabilities",
    "long_term_liabilities": "Long-term Liabilities",
    "equity": "Equity",
    "rental_income": "Rental Income",
    "other_income": "Other Income",
    "repairs_maintenance": "Repairs & Maintenance",
    "utilities": "Utilities",
    "insurance_taxes": "Insurance & Taxes",
    "administrative": "Administrative",
    "other_operating": "Other Operating",
    "other_expenses": "Other Expenses",
    UNCLASSIFIED: "Unclassified",
}


@dataclass(frozen=True)
class ClassificationRule:
    """
    One half-open range ``[range_start, range_end)`` for one account type.

    ``range_end=None`` leaves the range open above.
    """

    account_type: AccountType
    range_start: int
    range_end: int | None
    subsection_key: str

    def contains(self, number: int) -> bool:
        if number < self.range_start:
            return False
        return self.range_end is None or number < self.range_end

    @property
    def label(self) -> str:
        end = "" if self.range_end is None else self.range_end
        return f"{self.account_type.value}[{self.range_start},{end})"


@dataclass(frozen=True)
class ClassificationGap:
    """
    An account the table cannot place.

    reason is ``"non_numeric"`` when the account number has no leading
    digits, else ``"out_of_range"``.
    """

    account_id: UUID
    account_number: str
    account_name: str
    account_type: AccountType
    reason: str


_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def parse_account_number(account_number: str) -> int | None:
    """
    Integer value of an account number's leading digits, or None.

    Suffixes are ignored: "5100-01" and "5100.5" both read as 5100.
    """
    match = _LEADING_DIGITS.match(account_number)
    if match is None:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class ClassificationTable:
    """
    Named, versioned set of classification rules.

    Validated in ``__post_init__``; an invalid table cannot exist.
    """

    version: str
    rules: tuple[ClassificationRule, ...]

    def __post_init__(self) -> None:
        problems = _validate_rules(self.rules)
        if problems:
            raise ClassificationTableError(self.version, problems)

    def rules_for(self, account_type: AccountType) -> tuple[ClassificationRule, ...]:
        """Rules for one account type, ordered by range start."""
        return tuple(
            sorted(
                (r for r in self.rules if r.account_type == account_type),
                key=lambda r: r.range_start,
            )
        )

    def classify(self, account_type: AccountType, account_number: str) -> str:
        """Return the subsection key for an account, or ``UNCLASSIFIED``."""
        number = parse_account_number(account_number)
        if number is None:
            return UNCLASSIFIED
        for rule in self.rules:
            if rule.account_type == account_type and rule.contains(number):
                return rule.subsection_key
        return UNCLASSIFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "rules": [
                {
                    "account_type": r.account_type.value,
                    "range_start": r.range_start,
                    "range_end": r.range_end,
                    "subsection": r.subsection_key,
                }
                for r in self.rules
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClassificationTable:
        """
        Build a table from its dict form (as produced by ``to_dict`` or
        read from YAML).

        Raises:
            ClassificationTableError: on missing keys, unknown account types
                or non-integer bounds, and on any rule-level problem.
        """
        version = str(data.get("version", "")) or "unversioned"
        raw_rules = data.get("rules")
        if not isinstance(raw_rules, list) or not raw_rules:
            raise ClassificationTableError(version, ["rules must be a non-empty list"])

        rules: list[ClassificationRule] = []
        problems: list[str] = []
        for index, raw in enumerate(raw_rules):
            try:
                rules.append(
                    ClassificationRule(
                        account_type=AccountType(raw["account_type"]),
                        range_start=int(raw["range_start"]),
                        range_end=(
                            None if raw["range_end"] is None else int(raw["range_end"])
                        ),
                        subsection_key=str(raw["subsection"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                problems.append(f"rule {index}: {exc!r}")
        if problems:
            raise ClassificationTableError(version, problems)
        return cls(version=version, rules=tuple(rules))


def _validate_rules(rules: tuple[ClassificationRule, ...]) -> list[str]:
    problems: list[str] = []
    for rule in rules:
        label = rule.label
        if rule.range_end is not None and rule.range_start >= rule.range_end:
            problems.append(f"{label}: range_start must be below range_end")
        if rule.subsection_key not in SUBSECTION_KEYS.get(rule.account_type, ()):
            problems.append(
                f"{label}: subsection {rule.subsection_key!r} is not valid "
                f"for {rule.account_type.value} accounts"
            )

    for account_type in AccountType:
        ordered = sorted(
            (r for r in rules if r.account_type == account_type),
            key=lambda r: r.range_start,
        )
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.range_end is None or cur.range_start < prev.range_end:
                problems.append(f"{prev.label} overlaps {cur.label}")
    return problems


def _rule(account_type: AccountType, start: int, end: int | None, key: str) -> ClassificationRule:
    return ClassificationRule(account_type, start, end, key)


DEFAULT_CLASSIFICATION_TABLE = ClassificationTable(
    version="2026.1",
    rules=(
        _rule(AccountType.ASSET, 1000, 1500, "current_assets"),
        _rule(AccountType.ASSET, 1500, 1800, "fixed_assets"),
        _rule(AccountType.ASSET, 1800, 2000, "other_assets"),
        _rule(AccountType.LIABILITY, 2000, 2500, "current_liabilities"),
        _rule(AccountType.LIABILITY, 2500, 3000, "long_term_liabilities"),
        _rule(AccountType.EQUITY, 3000, 4000, "equity"),
        _rule(AccountType.REVENUE, 4000, 4100, "rental_income"),
        _rule(AccountType.REVENUE, 4100, 5000, "other_income"),
        _rule(AccountType.EXPENSE, 5000, 5100, "other_operating"),
        _rule(AccountType.EXPENSE, 5100, 5200, "repairs_maintenance"),
        _rule(AccountType.EXPENSE, 5200, 5300, "utilities"),
        _rule(AccountType.EXPENSE, 5300, 5500, "insurance_taxes"),
        _rule(AccountType.EXPENSE, 5500, 6000, "administrative"),
        _rule(AccountType.EXPENSE, 6000, None, "other_expenses"),
    ),
)


def find_classification_gaps(
    accounts: Iterable[AccountInfo],
    table: ClassificationTable,
) -> tuple[ClassificationGap, ...]:
    """
    Check a chart of accounts against a table.

    Header accounts are skipped; they never carry postings.  Results are
    ordered by account number.
    """
    gaps: list[ClassificationGap] = []
    for account in accounts:
        if account.is_header_account:
            continue
        if table.classify(account.account_type, account.account_number) != UNCLASSIFIED:
            continue
        reason = (
            "non_numeric"
            if parse_account_number(account.account_number) is None
            else "out_of_range"
        )
        gaps.append(
            ClassificationGap(
                account_id=account.account_id,
                account_number=account.account_number,
                account_name=account.account_name,
                account_type=account.account_type,
                reason=reason,
            )
        )
    return tuple(sorted(gaps, key=lambda g: g.account_number))


def load_classification_table(path: Path | str) -> ClassificationTable:
    """
    Load a classification table from a YAML file.

    Expected layout::

        version: "2026.1"
        rules:
          - {account_type: asset, range_start: 1000, range_end: 1500,
             subsection: current_assets}
          - {account_type: expense, range_start: 6000, range_end: null,
             subsection: other_expenses}
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ClassificationTableError(
            "unversioned", [f"{path}: top level must be a mapping"],
        )
    table = ClassificationTable.from_dict(data)
    logger.info(
        "classification_table_loaded",
        extra={
            "path": str(path),
            "version": table.version,
            "rule_count": len(table.rules),
        },
    )
    return table
