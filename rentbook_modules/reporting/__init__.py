"""
Financial Reporting Module (``rentbook_modules.reporting``).

Responsibility
--------------
Read-only module that generates statements from the posted ledger of a
property-management business: trial balance, classified balance sheet,
income statement (with prior-period / prior-year comparison), simplified
direct-method cash flow statement, and per-property comparison.

Architecture position
---------------------
**Modules layer** -- selectors feed the balance aggregator, the
classification table places accounts, and pure builders assemble frozen
report objects.  ``ReportingService`` wires them together.

Invariants enforced
-------------------
* No ledger rows are created or modified by this module.
* Statement computations derive entirely from posted ledger lines.
* Imbalances and classification gaps are reported, never hidden.
"""

from rentbook_modules.reporting.classification import (
    DEFAULT_CLASSIFICATION_TABLE,
    SUBSECTION_TITLES,
    UNCLASSIFIED,
    ClassificationGap,
    ClassificationRule,
    ClassificationTable,
    find_classification_gaps,
    load_classification_table,
)
from rentbook_modules.reporting.config import ReportingConfig
from rentbook_modules.reporting.models import (
    BalanceSheet,
    CashFlowLine,
    CashFlowSection,
    CashFlowStatement,
    IncomeStatement,
    OperatingActivities,
    PropertyComparisonRow,
    ReportMetadata,
    ReportType,
    StatementLine,
    StatementSection,
    TrialBalance,
    TrialBalanceLine,
)
from rentbook_modules.reporting.service import ReportingService
from rentbook_modules.reporting.statements import render_to_dict

__all__ = [
    # Service
    "ReportingService",
    # Config
    "ReportingConfig",
    # Classification
    "ClassificationRule",
    "ClassificationTable",
    "ClassificationGap",
    "DEFAULT_CLASSIFICATION_TABLE",
    "SUBSECTION_TITLES",
    "UNCLASSIFIED",
    "find_classification_gaps",
    "load_classification_table",
    # Models
    "ReportType",
    "ReportMetadata",
    "TrialBalanceLine",
    "TrialBalance",
    "StatementLine",
    "StatementSection",
    "BalanceSheet",
    "IncomeStatement",
    "CashFlowLine",
    "CashFlowSection",
    "OperatingActivities",
    "CashFlowStatement",
    "PropertyComparisonRow",
    # Rendering
    "render_to_dict",
]
