"""
Calendar-month helpers.

A budget month is identified by the first day of that month. Every month-scoped
query works on the half-open range ``[month_start, next_month_start)`` so that
month length (28-31 days, leap years) never needs to be computed by hand.
"""
import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

from finance_tracker.db.core import InvalidInputError, utcnow


_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def month_start(value: date) -> date:
    """Normalize any date to the first day of its month."""
    return value.replace(day=1)


def next_month_start(value: date) -> date:
    start = month_start(value)
    if start.month == 12:
        return date(start.year + 1, 1, 1)
    return date(start.year, start.month + 1, 1)


def month_range(value: date) -> Tuple[date, date]:
    """Return ``(first day, first day of the following month)`` for the month containing ``value``."""
    start = month_start(value)
    return start, next_month_start(start)


def current_month_start(today: Optional[date] = None) -> date:
    return month_start(today or utcnow().date())


def parse_month(value: Union[str, date, None]) -> date:
    """
    Parse a month identifier into the first day of that month.

    Accepts a ``date`` or a string in ``YYYY-MM`` or ``YYYY-MM-DD`` form.
    Raises InvalidInputError for anything else, including impossible dates.
    """
    if isinstance(value, datetime):
        return month_start(value.date())
    if isinstance(value, date):
        return month_start(value)
    if not isinstance(value, str):
        raise InvalidInputError("Month must be given as YYYY-MM or YYYY-MM-DD")

    text = value.strip()
    match = _YEAR_MONTH.match(text)
    try:
        if match:
            return date(int(match.group(1)), int(match.group(2)), 1)
        return month_start(date.fromisoformat(text))
    except ValueError:
        raise InvalidInputError(f"Invalid month: '{value}'. Use YYYY-MM or YYYY-MM-DD")
