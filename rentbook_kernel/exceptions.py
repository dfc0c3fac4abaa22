"""
Typed exception hierarchy for the rentbook kernel and reporting modules.

Every error has a typed class (catch by type, not by message), a ``code``
class attribute (machine-readable, API-safe) and structured attributes
(logged as ``exc_*`` fields by ``StructuredFormatter``).

    RentbookKernelError (base)
    |
    +-- DataAccessError            DATA_ACCESS_FAILURE
    |
    +-- ReportError
    |   +-- InvalidReportPeriodError   INVALID_REPORT_PERIOD
    |
    +-- ClassificationError
        +-- ClassificationTableError   INVALID_CLASSIFICATION_TABLE

Two conditions are deliberately NOT exceptions:

* A ledger imbalance (trial balance debits != credits, or A != L + E) is a
  reportable field (``is_balanced`` / ``imbalance_cents``) the caller must
  check and surface as a data-integrity warning.
* A classification gap (account number outside every configured range) is
  reported as a ``ClassificationGap`` value and an "Unclassified" bucket.

Handling pattern:

    try:
        report = service.generate_balance_sheet(business_id, as_of)
    except DataAccessError as e:
        # Pure read -- safe for the caller to retry.
        log.warning("report_failed", extra={"code": e.code, "op": e.operation})
    if not report.is_balanced:
        warn_user(report.imbalance_cents)
"""


class RentbookKernelError(Exception):
    """
    Base exception for all rentbook errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RENTBOOK_KERNEL_ERROR"


# Data access


class DataAccessError(RentbookKernelError):
    """
    A Ledger Reader or Chart-of-Accounts Reader query failed.

    Raised by selectors with the underlying driver error chained as
    ``__cause__``.  Generators never return a partial report when this
    is raised.
    """

    code: str = "DATA_ACCESS_FAILURE"

    def __init__(self, operation: str, business_id: str, detail: str):
        self.operation = operation
        self.business_id = business_id
        self.detail = detail
        super().__init__(
            f"Data access failed during {operation} for business "
            f"{business_id}: {detail}"
        )


# Report parameters


class ReportError(RentbookKernelError):
    """Base exception for report parameter errors."""

    code: str = "REPORT_ERROR"


class InvalidReportPeriodError(ReportError):
    """Report window start falls after its end."""

    code: str = "INVALID_REPORT_PERIOD"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Report period start {start_date} is after end {end_date}"
        )


# Classification


class ClassificationError(RentbookKernelError):
    """Base exception for account classification errors."""

    code: str = "CLASSIFICATION_ERROR"


class ClassificationTableError(ClassificationError):
    """
    The classification table is malformed.

    Raised for empty or inverted ranges, overlapping ranges within one
    account type, or subsection keys that do not belong to the account type.
    """

    code: str = "INVALID_CLASSIFICATION_TABLE"

    def __init__(self, version: str, problems: list[str]):
        self.version = version
        self.problems = problems
        super().__init__(
            f"Classification table {version} is invalid: "
            + "; ".join(problems)
        )
