"""
Date Utilities Module.

Calendar-day helpers used by the timeline engine:
- Lenient ISO-8601 parsing that returns None instead of raising
- Input and display formatting
- Whole-day differences, inclusive durations and range repair
- Month arithmetic for time-axis markers

All values are plain ``datetime.date`` objects. Time of day is discarded.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple

DISPLAY_FORMAT = "%b %d, %Y"
INPUT_FORMAT = "%Y-%m-%d"
MONTH_LABEL_FORMAT = "%b %Y"


def parse_date(value: Any) -> Optional[date]:
    """
    Parses a value into a calendar date.

    Accepts ``date`` objects, ``datetime`` objects (time is dropped) and
    ISO-8601 strings such as ``"2025-01-05"`` or ``"2025-01-05T10:00:00"``.

    Args:
        value: The value to parse.

    Returns:
        Optional[date]: The parsed date, or None if the value is missing or
            not a real calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def is_valid_date_string(value: Any) -> bool:
    """Returns True if the value parses to a calendar date."""
    return parse_date(value) is not None


def format_date_for_input(value: date) -> str:
    """
    Formats a date for input fields and serialization (``YYYY-MM-DD``).

    Args:
        value: The date to format.

    Returns:
        str: ISO formatted date.
    """
    return value.strftime(INPUT_FORMAT)


def format_date_for_display(value: Any) -> str:
    """
    Formats a date for display, e.g. ``"Jan 05, 2025"``.

    Unparseable strings are returned unchanged.

    Args:
        value: A date or date string.

    Returns:
        str: Display text.
    """
    parsed = parse_date(value)
    if parsed is None:
        return value if isinstance(value, str) else ""
    return parsed.strftime(DISPLAY_FORMAT)


def day_difference(later: date, earlier: date) -> int:
    """
    Returns the number of whole days from ``earlier`` to ``later``.

    The result is negative when ``later`` precedes ``earlier``.
    """
    return later.toordinal() - earlier.toordinal()


def calculate_duration(start: Any, end: Any) -> int:
    """
    Calculates the inclusive duration between two dates in days.

    Both the start and end day count, so a single-day item lasts 1 day.

    Args:
        start: Start date or date string.
        end: End date or date string.

    Returns:
        int: Inclusive day count, or 0 if either date is invalid.
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return 0
    return abs(day_difference(end_date, start_date)) + 1


def validate_date_range(start: date, end: date) -> Tuple[date, date]:
    """
    Ensures the end date is not before the start date.

    Inverted ranges are repaired by swapping rather than rejected.

    Args:
        start: Proposed start date.
        end: Proposed end date.

    Returns:
        Tuple[date, date]: (start, end) in chronological order.
    """
    if start > end:
        return end, start
    return start, end


def add_days(value: date, days: int) -> date:
    """Returns ``value`` shifted by a whole number of days."""
    return value + timedelta(days=days)


def first_of_month(value: date) -> date:
    """Returns the first day of the month containing ``value``."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """
    Shifts a date by whole calendar months.

    The day is clamped to the length of the target month, so
    ``2025-01-31`` plus one month is ``2025-02-28``.

    Args:
        value: The date to shift.
        months: Number of months (may be negative).

    Returns:
        date: The shifted date.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_label(value: date) -> str:
    """Returns the axis label for a month, e.g. ``"Jan 2025"``."""
    return value.strftime(MONTH_LABEL_FORMAT)


def today_string() -> str:
    """Returns today's date in ``YYYY-MM-DD`` format."""
    return format_date_for_input(date.today())


class IsoDateUtility:
    """
    Default date collaborator backed by the ISO-8601 helpers above.

    Satisfies the ``DateUtility`` protocol.
    """

    def parse(self, value: Any) -> Optional[date]:
        return parse_date(value)

    def format(self, value: date) -> str:
        return format_date_for_input(value)

    def day_difference(self, later: date, earlier: date) -> int:
        return day_difference(later, earlier)
