"""Date-only utilities (UTC, no time-of-day)"""

from datetime import date, datetime, timezone
from typing import Tuple, Union
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

DateInput = Union[str, date, datetime]


def utc_today() -> date:
    """Current calendar date in UTC"""
    return datetime.now(timezone.utc).date()


def normalize_date_only(value: DateInput) -> date:
    """
    Reduce a date-ish input to a UTC calendar date.

    ISO strings are parsed into the same values as their datetime form, so
    one instant always lands on one date:
    - aware datetimes (and strings with an offset) are converted to UTC first
    - naive datetimes and plain "YYYY-MM-DD" strings are taken as UTC
    """
    if isinstance(value, str):
        try:
            value = isoparse(value.strip())
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Unrecognized date value: {value!r}") from e
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError(f"Unrecognized date value: {value!r}")


def add_months(base: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month"""
    return base + relativedelta(months=months)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month"""
    first = date(year, month, 1)
    return first, first + relativedelta(months=1, days=-1)


def format_date_br(value: date) -> str:
    """dd/mm/yyyy"""
    return value.strftime("%d/%m/%Y")
