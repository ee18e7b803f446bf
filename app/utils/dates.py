from datetime import date, datetime, time
from typing import Tuple, Union
from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def first_day_of_month(value: DateLike) -> date:
    """Normalize any date/datetime to the first day of its month"""
    return date(value.year, value.month, 1)


def last_day_of_month(value: DateLike) -> date:
    # relativedelta(day=31) clamps to the real last day (28, 29, 30 or 31)
    return first_day_of_month(value) + relativedelta(day=31)


def month_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    """
    Half-open boundaries [start, end) of the month containing value:
    first day 00:00:00 up to, but excluding, 00:00:00 of the next month.
    """
    start = datetime.combine(first_day_of_month(value), time.min)
    end = start + relativedelta(months=1)
    return start, end


def parse_month(value: str) -> date:
    """Parse "YYYY-MM" (or a full ISO date) into the first day of that month"""
    parts = value.strip().split("-")
    if len(parts) < 2:
        raise ValueError(f"Invalid month: {value!r}, expected YYYY-MM")
    return date(int(parts[0]), int(parts[1]), 1)


def format_month(value: DateLike) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def current_month() -> date:
    return first_day_of_month(date.today())
