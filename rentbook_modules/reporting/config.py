"""
Reporting Configuration Schema.

Defines the reporting currency, zero-balance and tolerance policy, the
synthetic current-earnings line, and which classification table places
accounts into statement sections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

import yaml

from rentbook_kernel.logging_config import get_logger
from rentbook_modules.reporting.classification import (
    DEFAULT_CLASSIFICATION_TABLE,
    ClassificationTable,
    load_classification_table,
)

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls classification, formatting, and report generation.
    """

    # Account-number ranges -> statement subsections
    classification: ClassificationTable = field(
        default_factory=lambda: DEFAULT_CLASSIFICATION_TABLE,
    )

    # Single reporting currency
    currency_code: str = "CAD"

    # Entity name shown on reports
    entity_name: str = "Company"

    # Whether to include accounts with zero balance in the trial balance
    include_zero_balances: bool = False

    # Allowed |assets - (liabilities + equity)| on the balance sheet.
    # Integer cents leave no rounding source, so the default is exact.
    balance_tolerance_cents: int = 0

    # Synthetic equity line carrying year-to-date net income
    current_earnings_account_number: str = "3400"
    current_earnings_account_name: str = "Current Year Earnings"

    def __post_init__(self):
        if self.balance_tolerance_cents < 0:
            raise ValueError("balance_tolerance_cents cannot be negative")
        if len(self.currency_code) != 3:
            raise ValueError("currency_code must be a 3-letter ISO 4217 code")
        if not self.current_earnings_account_number:
            raise ValueError("current_earnings_account_number cannot be empty")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create config from dictionary.

        ``classification`` may be a table dict (``version`` + ``rules``) or a
        path to a YAML table file.
        """
        data = dict(data)
        raw = data.get("classification")
        if isinstance(raw, dict):
            data["classification"] = ClassificationTable.from_dict(raw)
        elif isinstance(raw, (str, Path)):
            data["classification"] = load_classification_table(raw)
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """Create config from a YAML file with a top-level ``reporting`` key
        (or the bare mapping)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if "reporting" in data:
            data = data["reporting"] or {}
        table_path = data.get("classification")
        if isinstance(table_path, str) and not Path(table_path).is_absolute():
            # Table paths are relative to the config file.
            data = {**data, "classification": Path(path).parent / table_path}
        return cls.from_dict(data)
