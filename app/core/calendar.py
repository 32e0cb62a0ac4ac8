"""TRENDLINE — Calendar Functions.

Pure date arithmetic shared by every rollup engine. All helpers take and
return ``datetime.date`` values; nothing here mutates its input.
"""

import math
from datetime import date, timedelta
from typing import List, Tuple

MONTH_NAMES = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]

# Python weekday(): Monday=0 ... Sunday=6
WEEKDAYS = {"mon": 0, "sun": 6}
_DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Largest shift applied when aligning a prior-year date to a weekday
MAX_WEEKDAY_SHIFT = 3


def iso_week(d: date) -> int:
    """ISO-8601 week number (1-53); week 1 holds the year's first Thursday."""
    return d.isocalendar()[1]


def iso_year(d: date) -> int:
    """ISO-8601 week-numbering year, which differs from d.year around Jan 1."""
    return d.isocalendar()[0]


def week_of_month(day_of_month: int) -> int:
    """Bucket a day of month into Wk 1..Wk 5 (days 1-7 = 1, 8-14 = 2, ...)."""
    return math.ceil(day_of_month / 7)


def shift_years(d: date, years: int) -> date:
    """Same month/day ``years`` away. Feb 29 lands on Feb 28 in non-leap years."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def closest_weekday_last_year(d: date) -> date:
    """Date one year back, moved to the nearest day sharing d's weekday.

    e.g. Mon Feb 9, 2026 → Mon Feb 10, 2025.
    """
    py = shift_years(d, -1)
    diff = d.weekday() - py.weekday()
    if diff > MAX_WEEKDAY_SHIFT:
        diff -= 7
    if diff < -MAX_WEEKDAY_SHIFT:
        diff += 7
    return py + timedelta(days=diff)


def _first_weekday_index(first_weekday: str) -> int:
    try:
        return WEEKDAYS[first_weekday.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported week start '{first_weekday}', expected one of {sorted(WEEKDAYS)}"
        )


def week_start(d: date, first_weekday: str = "sun") -> date:
    """Most recent ``first_weekday`` on or before d."""
    first = _first_weekday_index(first_weekday)
    return d - timedelta(days=(d.weekday() - first) % 7)


def weekday_labels(first_weekday: str = "sun") -> List[str]:
    """Day column labels in week order, e.g. Sun..Sat."""
    first = _first_weekday_index(first_weekday)
    return [_DAY_NAMES[(first + i) % 7] for i in range(7)]


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def month_label(year: int, month: int) -> str:
    """Short label like 'Feb 26'."""
    return f"{MONTH_NAMES[month - 1]} {str(year)[2:]}"


def shift_months(year: int, month: int, months: int) -> Tuple[int, int]:
    """(year, month) moved by ``months`` calendar months (may be negative)."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def short_date_label(d: date) -> str:
    """Label like 'Feb 08' used for week starts."""
    return f"{MONTH_NAMES[d.month - 1]} {d.day:02d}"
