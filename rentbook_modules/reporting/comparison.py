"""
Comparison windows for period-over-period reports.

Pure date arithmetic.  A comparison report is the same builder run over the
window returned here; nothing in this module reads the ledger.
"""

from __future__ import annotations

from datetime import date, timedelta


def shift_years(value: date, years: int) -> date:
    """
    Move a date by whole calendar years.

    Feb 29 maps to Feb 28 when the target year is not a leap year.
    """
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def year_start(value: date) -> date:
    """January 1 of the date's year."""
    return date(value.year, 1, 1)


def prior_period_window(start_date: date, end_date: date) -> tuple[date, date]:
    """
    The window of equal inclusive length ending the day before ``start_date``.

    [2026-04-01, 2026-04-30] -> [2026-03-02, 2026-03-31]
    """
    prior_end = start_date - timedelta(days=1)
    prior_start = prior_end - (end_date - start_date)
    return prior_start, prior_end


def prior_year_window(start_date: date, end_date: date) -> tuple[date, date]:
    """The same month/day range one calendar year earlier."""
    return shift_years(start_date, -1), shift_years(end_date, -1)
