# File: utils/dt_utils.py
"""Calendar utilities for Immersion Tracker.

Pure Python date functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, re, and dateutil.

DateKeys are `YYYY-MM-DD` strings in the LOCAL calendar. Arithmetic is done
on `datetime.date` objects (calendar days), never on elapsed seconds, so DST
transitions cannot shift a result by one day.

Functions:
    - set_default_timezone: Configure the local calendar
    - dt_today_local: Today's date in the local timezone
    - dt_today_key: Today's DateKey
    - dt_is_valid_date_key: Syntactic + calendar validation
    - dt_parse_date_key: Strict DateKey parsing (raises InvalidDateError)
    - dt_to_date_key: Format a date as a DateKey
    - dt_shift: Add local calendar days to a DateKey
    - dt_weekday_index: Monday=0 .. Sunday=6
    - dt_week_key: Monday on or before a DateKey
    - dt_iter_date_keys: Inclusive ascending DateKey range
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime
import logging
import re
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid importing const.py, which is HA-facing)
# ==============================================================================

# Default timezone - overridden during integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

DATE_KEY_FORMAT = "%Y-%m-%d"
_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Safety limit for range iteration (roughly 100 years of days)
MAX_DATE_RANGE_DAYS = 36525


# ==============================================================================
# Exceptions
# ==============================================================================


class InvalidDateError(ValueError):
    """Raised when a value is not a well-formed calendar DateKey.

    Attributes:
        value: The rejected input, kept for error messages.
    """

    def __init__(self, value: object, message: str | None = None) -> None:
        """Initialize InvalidDateError with the rejected value."""
        self.value = value
        super().__init__(
            message or f"Invalid date key: {value!r} (expected YYYY-MM-DD)"
        )


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup with the Home Assistant timezone.

    Args:
        tz: ZoneInfo object representing the local calendar
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in the local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 8, 20)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_key(tz: ZoneInfo | None = None) -> str:
    """Return today's DateKey in the local timezone.

    The local calendar decides the day: at 00:30 in Tokyo this is already the
    next day even though UTC is still on the previous one.

    Example:
        "2025-08-20"
    """
    return dt_to_date_key(dt_today_local(tz))


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def dt_is_valid_date_key(value: object) -> bool:
    """Return True if value is a well-formed DateKey for a real calendar day."""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_KEY_FORMAT)
    except ValueError:
        return False
    return True


def dt_parse_date_key(value: object) -> date:
    """Parse a DateKey into a `datetime.date`.

    Only the canonical `YYYY-MM-DD` form is accepted. Compact ISO forms
    ("20250820"), datetimes and impossible days ("2025-02-30") are rejected
    rather than clamped.

    Raises:
        InvalidDateError: If value is not a well-formed DateKey.
    """
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        raise InvalidDateError(value)
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except ValueError as err:
        raise InvalidDateError(value) from err


def dt_to_date_key(value: date) -> str:
    """Format a `datetime.date` as a DateKey.

    A `datetime` is reduced to its date without timezone conversion; convert
    to local time first if it is not already local.
    Years below 1000 stay zero-padded ("0001-01-02").
    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


# ==============================================================================
# Arithmetic
# ==============================================================================


def dt_shift(date_key: str, delta_days: int) -> str:
    """Add `delta_days` local calendar days to a DateKey (may be negative).

    Handles month/year rollover and leap days. Works on calendar dates, so a
    23- or 25-hour DST day still counts as exactly one day.

    Contract:
        dt_shift(dt_shift(d, n), -n) == d  (whenever the first shift is in range)

    Example:
        >>> dt_shift("2025-08-20", -1)
        "2025-08-19"
        >>> dt_shift("2024-12-31", 1)
        "2025-01-01"

    Raises:
        InvalidDateError: If date_key is not a well-formed DateKey, or the
            result falls outside 0001-01-01..9999-12-31.
        TypeError: If delta_days is not an int.
    """
    if isinstance(delta_days, bool) or not isinstance(delta_days, int):
        raise TypeError(f"delta_days must be an int, got {delta_days!r}")
    parsed = dt_parse_date_key(date_key)
    try:
        shifted = parsed + relativedelta(days=delta_days)
    except OverflowError as err:
        raise InvalidDateError(
            date_key, f"Date key {date_key} shifted by {delta_days} days is out of range"
        ) from err
    return dt_to_date_key(shifted)


def dt_weekday_index(date_key: str) -> int:
    """Return the ISO-style weekday index (Monday=0 .. Sunday=6).

    Computed from the Sunday-first native index (Sunday=0 .. Saturday=6) as
    `(native + 6) % 7`.
    """
    native = dt_parse_date_key(date_key).isoweekday() % 7
    return (native + 6) % 7


def dt_week_key(date_key: str) -> str:
    """Return the WeekKey (Monday on or before date_key).

    Example:
        >>> dt_week_key("2025-08-20")  # Wednesday
        "2025-08-18"
        >>> dt_week_key("2025-08-24")  # Sunday
        "2025-08-18"
    """
    return dt_shift(date_key, -dt_weekday_index(date_key))


def dt_iter_date_keys(start_key: str, end_key: str) -> Iterator[str]:
    """Yield DateKeys from start_key to end_key inclusive, ascending.

    Yields nothing when end_key is before start_key.

    Raises:
        InvalidDateError: If either bound is malformed.
        ValueError: If the range exceeds MAX_DATE_RANGE_DAYS.
    """
    start = dt_parse_date_key(start_key)
    end = dt_parse_date_key(end_key)
    span = (end - start).days
    if span > MAX_DATE_RANGE_DAYS:
        raise ValueError(
            f"Date range {start_key}..{end_key} exceeds {MAX_DATE_RANGE_DAYS} days"
        )
    for offset in range(span + 1):
        yield dt_to_date_key(start + relativedelta(days=offset))
