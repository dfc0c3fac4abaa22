#!/usr/bin/env python3
"""
View financial reports from persisted ledger data.

Connects to the database (assumes tables and postings already exist) and
prints the requested statements for one business as JSON.

Usage:
    python3 scripts/view_reports.py BUSINESS_ID --start 2026-01-01 --end 2026-12-31
    python3 scripts/view_reports.py BUSINESS_ID --end 2026-06-30 --report balance_sheet
    python3 scripts/view_reports.py BUSINESS_ID --start 2026-01-01 --end 2026-03-31 \\
        --report comparison --property P1 --property P2

The database URL comes from --database-url, else RENTBOOK_DATABASE_URL.
"""

import argparse
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path
from uuid import UUID

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

REPORTS = (
    "trial_balance",
    "balance_sheet",
    "income_statement",
    "cash_flow",
    "comparison",
    "validate",
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print financial reports as JSON")
    parser.add_argument("business_id", type=UUID, help="Business UUID")
    parser.add_argument(
        "--report",
        action="append",
        choices=REPORTS,
        help="Report to print (repeatable; default: all four statements)",
    )
    parser.add_argument("--start", type=date.fromisoformat, help="Window start (YYYY-MM-DD)")
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=date.today(),
        help="Window end / as-of date (default: today)",
    )
    parser.add_argument(
        "--property",
        dest="properties",
        action="append",
        type=UUID,
        default=[],
        help="Property UUID (repeatable; first one scopes single statements)",
    )
    parser.add_argument("--compare-prior-period", action="store_true")
    parser.add_argument("--compare-prior-year", action="store_true")
    parser.add_argument("--include-zero-balances", action="store_true")
    parser.add_argument("--config", type=Path, help="Reporting config YAML")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("RENTBOOK_DATABASE_URL"),
        help="SQLAlchemy URL (default: $RENTBOOK_DATABASE_URL)",
    )
    parser.add_argument("--verbose", action="store_true", help="Emit JSON logs to stderr")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from rentbook_kernel.db.engine import get_session, init_engine_from_url
    from rentbook_kernel.domain.clock import SystemClock
    from rentbook_kernel.exceptions import RentbookKernelError
    from rentbook_kernel.logging_config import configure_logging
    from rentbook_modules.reporting.config import ReportingConfig
    from rentbook_modules.reporting.service import ReportingService

    if args.verbose:
        configure_logging(stream=sys.stderr)
    else:
        logging.disable(logging.CRITICAL)

    if not args.database_url:
        print("  ERROR: no database URL (use --database-url or RENTBOOK_DATABASE_URL)",
              file=sys.stderr)
        return 2

    reports = args.report or ["trial_balance", "balance_sheet", "income_statement", "cash_flow"]
    start = args.start or date(args.end.year, 1, 1)
    property_id = args.properties[0] if args.properties else None

    config = (
        ReportingConfig.from_yaml(args.config) if args.config
        else ReportingConfig.with_defaults()
    )

    init_engine_from_url(args.database_url, echo=False)
    session = get_session()

    try:
        svc = ReportingService(session=session, clock=SystemClock(), config=config)
        output: dict[str, object] = {}

        for name in reports:
            if name == "trial_balance":
                report = svc.generate_trial_balance(
                    args.business_id,
                    args.end,
                    property_id=property_id,
                    include_zero_balances=args.include_zero_balances or None,
                )
            elif name == "balance_sheet":
                report = svc.generate_balance_sheet(
                    args.business_id,
                    args.end,
                    property_id=property_id,
                    compare_prior_year=args.compare_prior_year,
                )
            elif name == "income_statement":
                report = svc.generate_income_statement(
                    args.business_id,
                    start,
                    args.end,
                    property_id=property_id,
                    compare_prior_period=args.compare_prior_period,
                    compare_prior_year=args.compare_prior_year,
                )
            elif name == "cash_flow":
                report = svc.generate_cash_flow_statement(
                    args.business_id, start, args.end, property_id=property_id,
                )
            elif name == "comparison":
                report = svc.generate_property_comparison(
                    args.business_id, args.properties, start, args.end,
                )
            else:
                report = svc.validate_chart(args.business_id)
            output[name] = svc.to_dict(report)

        print(json.dumps(output, indent=2))
        return 0

    except RentbookKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
