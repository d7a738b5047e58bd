# coinfolio/utils/date_utils.py
"""
UTC day helpers for the valuation engine.

A "day" throughout the engine is a date standing for its UTC midnight
instant. Transactions and price points carry full timestamps; these
helpers bucket them into days.

Usage:
    from coinfolio.utils.date_utils import to_utc_day, build_day_range

    days = build_day_range(30)
"""

from datetime import date, datetime, time, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    """
    Return an aware datetime in UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_day(value: datetime | date) -> date:
    """
    Bucket a timestamp into its UTC day.

    Args:
        value: Timestamp (naive values are treated as UTC) or a date

    Returns:
        The UTC calendar date containing the instant
    """
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def day_start(day: date) -> datetime:
    """UTC midnight instant of a day."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def next_day_start(day: date) -> datetime:
    """
    UTC midnight of the following day.

    Anything strictly before this instant belongs to `day` or earlier.
    """
    return day_start(day + timedelta(days=1))


def utc_today() -> date:
    """Current date in UTC."""
    return datetime.now(timezone.utc).date()


def build_day_range(days: int, end: date | None = None) -> list[date]:
    """
    Build `days` consecutive days ending at `end` (inclusive).

    Args:
        days: Number of days in the range
        end: Last day of the range (default: today in UTC)

    Returns:
        List of dates in chronological order

    Example:
        >>> build_day_range(3, date(2024, 1, 3))
        [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    """
    if end is None:
        end = utc_today()
    start = end - timedelta(days=days - 1)
    return [start + timedelta(days=offset) for offset in range(days)]
