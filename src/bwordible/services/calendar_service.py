"""Calendar key utilities.

A date key is a ``YYYY-MM-DD`` string for one civil day in the reference
time zone. Only ``date_key_for`` and the display helpers look at a real
zone; all arithmetic runs on plain ``datetime.date`` values so daylight
saving transitions can never shift a key by a day.
"""
import re
from datetime import UTC, date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

DATE_KEY_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class InvalidDateKeyError(ValueError):
    """Raised when a value is not a canonical, real calendar date key."""


def date_key_for(instant: datetime, time_zone: str) -> str:
    """Return the civil date of ``instant`` as observed in ``time_zone``.

    Naive datetimes are taken to be UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    local = instant.astimezone(ZoneInfo(time_zone))
    return local.date().isoformat()


def is_valid_date_key(value) -> bool:
    """Check that ``value`` is a zero-padded YYYY-MM-DD string naming a real day."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.fullmatch(value):
        return False
    year, month, day = (int(part) for part in value.split("-"))
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def parse_date_key(value) -> date:
    """Convert a date key to a ``date``, raising InvalidDateKeyError if malformed."""
    if not is_valid_date_key(value):
        raise InvalidDateKeyError(f"Invalid date key: {value!r}")
    return date.fromisoformat(value)


def sanitize_date_key(value) -> Optional[str]:
    """Return ``value`` when it is a valid date key, otherwise None."""
    return value if is_valid_date_key(value) else None


def compare_date_keys(left: str, right: str) -> int:
    """Order two date keys chronologically (negative, zero or positive)."""
    return (left > right) - (left < right)


def shift_date_key(date_key: str, delta_days: int) -> str:
    """Return the key ``delta_days`` calendar days after ``date_key``."""
    return (parse_date_key(date_key) + timedelta(days=delta_days)).isoformat()


def day_distance(date_key: str, other_key: str) -> int:
    """Number of calendar days from ``other_key`` to ``date_key``."""
    return (parse_date_key(date_key) - parse_date_key(other_key)).days


def format_for_display(date_key: str, time_zone: str) -> str:
    """Render a key as e.g. ``Mar 1, 2026``, anchored at noon UTC."""
    anchor = datetime.combine(parse_date_key(date_key), time(12), tzinfo=UTC)
    local = anchor.astimezone(ZoneInfo(time_zone))
    return f"{MONTH_ABBREVIATIONS[local.month - 1]} {local.day}, {local.year}"


def next_midnight(now: datetime, time_zone: str) -> datetime:
    """Return the next instant at which the civil date changes in ``time_zone``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    zone = ZoneInfo(time_zone)
    tomorrow = now.astimezone(zone).date() + timedelta(days=1)
    return datetime.combine(tomorrow, time(0), tzinfo=zone)


def seconds_until_next_day(now: datetime, time_zone: str) -> int:
    """Whole seconds remaining until the next puzzle unlocks."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    remaining = next_midnight(now, time_zone).astimezone(UTC) - now.astimezone(UTC)
    return max(0, int(remaining.total_seconds()))
