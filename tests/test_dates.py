from datetime import date, datetime

import pytest

from app.utils.dates import first_day_of_month, last_day_of_month, month_bounds, parse_month, format_month


def test_first_and_last_day_of_month():
    assert first_day_of_month(datetime(2025, 1, 31, 18, 30)) == date(2025, 1, 1)
    assert last_day_of_month(date(2025, 1, 15)) == date(2025, 1, 31)
    assert last_day_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert last_day_of_month(date(2025, 2, 10)) == date(2025, 2, 28)
    assert last_day_of_month(date(2025, 4, 1)) == date(2025, 4, 30)


def test_month_bounds_cover_the_whole_month():
    start, end = month_bounds(date(2025, 1, 1))
    assert start == datetime(2025, 1, 1, 0, 0, 0)
    assert end == datetime(2025, 2, 1, 0, 0, 0)

    last_instant = datetime(2025, 1, 31, 23, 59, 59, 999999)
    assert start <= last_instant < end

    _, december_end = month_bounds(date(2024, 12, 15))
    assert december_end == datetime(2025, 1, 1, 0, 0, 0)


def test_parse_month():
    assert parse_month("2025-01") == date(2025, 1, 1)
    assert parse_month("2025-03-17") == date(2025, 3, 1)
    assert format_month(date(2025, 3, 1)) == "2025-03"


@pytest.mark.parametrize("value", ["2025", "2025-13", "january"])
def test_parse_month_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_month(value)
