from datetime import date, datetime

import pytest

from finance_tracker.db.core import InvalidInputError
from finance_tracker.services.months import (
    current_month_start,
    month_range,
    next_month_start,
    parse_month,
)


@pytest.mark.parametrize("value,expected", [
    ("2026-01", date(2026, 1, 1)),
    ("2026-01-31", date(2026, 1, 1)),
    (" 2024-02 ", date(2024, 2, 1)),
    (date(2024, 2, 29), date(2024, 2, 1)),
    (datetime(2025, 7, 4, 13, 30), date(2025, 7, 1)),
])
def test_parse_month(value, expected):
    assert parse_month(value) == expected


@pytest.mark.parametrize("value", ["2026-13", "2026-00", "2025-02-29", "01-2026", "", None, 202601])
def test_parse_month_rejects(value):
    with pytest.raises(InvalidInputError):
        parse_month(value)


@pytest.mark.parametrize("value,expected", [
    (date(2024, 2, 10), (date(2024, 2, 1), date(2024, 3, 1))),
    (date(2025, 2, 28), (date(2025, 2, 1), date(2025, 3, 1))),
    (date(2025, 12, 31), (date(2025, 12, 1), date(2026, 1, 1))),
])
def test_month_range_is_half_open(value, expected):
    assert month_range(value) == expected


def test_last_day_of_february_before_next_month():
    for year, last in ((2024, 29), (2025, 28)):
        start, end = month_range(date(year, 2, 1))
        assert start <= date(year, 2, last) < end
        assert not start <= date(year, 3, 1) < end


def test_next_month_start_and_current_month():
    assert next_month_start(date(2026, 1, 31)) == date(2026, 2, 1)
    assert current_month_start(date(2026, 10, 19)) == date(2026, 10, 1)
    assert current_month_start().day == 1
