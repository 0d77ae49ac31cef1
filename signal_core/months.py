"""Month key helpers.

Month keys are always zero-padded "YYYY-MM" strings, so sorting them
lexicographically is the same as sorting them chronologically.
"""

from collections.abc import Iterable
from datetime import datetime, timezone


def format_month_key(year: int, month: int) -> str:
    """Build a zero-padded month key."""
    return f"{year:04d}-{month:02d}"


def month_key_utc(moment: datetime) -> str:
    """Get the UTC calendar month key of a datetime."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return format_month_key(moment.year, moment.month)


def month_key_from_date(date_str: str) -> str:
    """Get the month key of a "YYYY-MM-DD" date string."""
    return date_str[:7]


def parse_month_key(key: str) -> tuple[int, int]:
    """Split a month key into (year, month)."""
    year_str, month_str = key.split("-")
    return int(year_str), int(month_str)


def add_months(key: str, delta: int) -> str:
    """Shift a month key by delta months (negative goes back)."""
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + delta
    return format_month_key(index // 12, index % 12 + 1)


def find_month_at_or_before(
    months: Iterable[str], target: str, max_steps: int = 12
) -> str | None:
    """Find the latest existing month at or before target.

    Checks target first, then steps back one month at a time, up to
    max_steps steps.

    Returns:
        The first key found, or None if none exists within the window
    """
    available = set(months)
    if target in available:
        return target

    current = target
    for _ in range(max_steps):
        current = add_months(current, -1)
        if current in available:
            return current
    return None
