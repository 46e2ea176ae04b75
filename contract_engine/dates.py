"""
Date utilities shared by every calculator.

All functions work on calendar dates (no time component) and never read the
wall clock: callers pass ``today`` explicitly.
"""

import re
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidInput


def parse_iso_date(value, field_name: str = "date") -> date | None:
    """Coerce a backend/JSON value into a date.

    Accepts date, datetime or 'YYYY-MM-DD' strings (a trailing time part is
    ignored). Empty values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidInput(f"{field_name} must be an ISO date (YYYY-MM-DD), got: {value!r}")
    raise InvalidInput(f"{field_name} must be an ISO date (YYYY-MM-DD), got: {value!r}")


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the last valid day of the month.

    Jan 31 + 1 month = Feb 28 (or 29), never an overflowed March date.
    """
    return start + relativedelta(months=months)


def add_days(start: date, days: int) -> date:
    return start + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)."""
    return (end - start).days


def reference_month(value: date) -> date:
    """First day of the month containing value (invoice competence)."""
    return value.replace(day=1)


def format_br_date(value: date | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")


def parse_br_date(text: str | None, today: date) -> date | None:
    """
    Interpret a loosely typed Brazilian date.

    Only digits are considered:
    - 3-4 digits: ddmm, year taken from today
    - 8 digits: ddmmaaaa
    - anything else: None (the caller keeps its previous value)

    Raises InvalidInput when the digits do not form a real date.
    """
    digits = re.sub(r"\D", "", text or "")

    if 3 <= len(digits) <= 4:
        day, month, year = digits[0:2], digits[2:4], str(today.year)
    elif len(digits) == 8:
        day, month, year = digits[0:2], digits[2:4], digits[4:8]
    else:
        return None

    d, m, y = int(day), int(month), int(year)
    if not (0 < d <= 31 and 0 < m <= 12 and y > 1900):
        raise InvalidInput(f"Invalid date: {text!r}")

    try:
        return date(y, m, d)
    except ValueError:
        # 31/02 and friends pass the range check above
        raise InvalidInput(f"Invalid date: {text!r}")
