"""Calendar arithmetic over local, timezone-naive dates.

All helpers accept either a ``date`` or a ``datetime``; datetimes are collapsed to their
calendar day first, so time-of-day never leaks into a comparison. Weekdays use the
Sunday-based index (0=Sunday .. 6=Saturday) and months are 1-based, as in ``datetime``.

Uses ``dateutil.relativedelta`` for month stepping, which clamps Jan 31 + 1 month to
Feb 28/29 instead of overflowing into March.
"""

import calendar
import re
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from src.core.config import constants


_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")


def as_date(value: date | datetime) -> date:
    """Collapse a datetime to its calendar day; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(value: date | datetime) -> int:
    """Return the Sunday-based weekday index (0=Sunday .. 6=Saturday)."""
    return (as_date(value).weekday() + 1) % constants.DAYS_PER_WEEK


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def day_key(value: date | datetime) -> str:
    """Format a date as its ``YYYY-MM-DD`` day key."""
    return as_date(value).strftime(constants.DAY_KEY_FORMAT)


def month_key(value: date | datetime) -> str:
    """Format a date as its ``YYYY-MM`` month key."""
    return as_date(value).strftime(constants.MONTH_KEY_FORMAT)


def parse_day_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` day key.

    Raises:
        ValueError: If the key is not a well-formed, calendar-valid day key
    """
    if not isinstance(key, str) or not _DAY_KEY_RE.match(key):
        msg = f"Invalid day key: {key!r}. Expected YYYY-MM-DD"
        raise ValueError(msg)
    try:
        return datetime.strptime(key, constants.DAY_KEY_FORMAT).date()
    except ValueError as e:
        msg = f"Invalid day key: {key!r} is not a calendar date"
        raise ValueError(msg) from e


def parse_month_key(key: str) -> tuple[int, int]:
    """Parse a ``YYYY-MM`` month key into ``(year, month)``.

    Raises:
        ValueError: If the key is not a well-formed month key
    """
    if not isinstance(key, str) or not _MONTH_KEY_RE.match(key):
        msg = f"Invalid month key: {key!r}. Expected YYYY-MM"
        raise ValueError(msg)
    try:
        parsed = datetime.strptime(key, constants.MONTH_KEY_FORMAT)
    except ValueError as e:
        msg = f"Invalid month key: {key!r} is not a calendar month"
        raise ValueError(msg) from e
    return parsed.year, parsed.month


def to_day_key(value: object) -> str | None:
    """Coerce a day key, ISO timestamp, date or datetime to a day key.

    Aware timestamps are converted to local time before taking the day. Anything that
    cannot be read as a date yields None.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return day_key(value.astimezone() if value.tzinfo else value)
    if isinstance(value, date):
        return day_key(value)
    if not isinstance(value, str):
        return None
    if _DAY_KEY_RE.match(value):
        try:
            return day_key(parse_day_key(value))
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return to_day_key(parsed)


def to_month_key(value: object) -> str | None:
    """Coerce a month key or anything ``to_day_key`` accepts to a month key."""
    if isinstance(value, str) and _MONTH_KEY_RE.match(value):
        try:
            parse_month_key(value)
        except ValueError:
            return None
        return value
    key = to_day_key(value)
    return key[:7] if key else None


# ---------------------------------------------------------------------------
# Differences
# ---------------------------------------------------------------------------


def day_diff(a: date | datetime, b: date | datetime) -> int:
    """Whole days from ``b`` to ``a`` (``a - b``), ignoring time of day."""
    return (as_date(a) - as_date(b)).days


def start_of_week(value: date | datetime, week_start: int = 0) -> date:
    """Return the first day of the week containing ``value``."""
    d = as_date(value)
    offset = (weekday_index(d) - week_start) % constants.DAYS_PER_WEEK
    return d - timedelta(days=offset)


def week_key(value: date | datetime, week_start: int = 0) -> str:
    """Day key of the first day of the week containing ``value``."""
    return day_key(start_of_week(value, week_start))


def week_diff(a: date | datetime, b: date | datetime, week_start: int = 0) -> int:
    """Whole weeks between the week starts of ``a`` and ``b`` (``a - b``)."""
    return day_diff(start_of_week(a, week_start), start_of_week(b, week_start)) // constants.DAYS_PER_WEEK


def month_diff(a: date | datetime, b: date | datetime) -> int:
    """Whole months from ``b`` to ``a``, ignoring the day of month."""
    a, b = as_date(a), as_date(b)
    return (a.year - b.year) * constants.MONTHS_PER_YEAR + (a.month - b.month)


# ---------------------------------------------------------------------------
# Month length
# ---------------------------------------------------------------------------


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in ``month`` (1-12) of ``year``, leap-year aware."""
    return calendar.monthrange(year, month)[1]


def clamp_day(day: int, year: int, month: int) -> int:
    """Cap ``day`` to the last day of the given month."""
    return min(day, last_day_of_month(year, month))


# ---------------------------------------------------------------------------
# Stepping
# ---------------------------------------------------------------------------


def add_days(value: date | datetime, days: int) -> date:
    return as_date(value) + timedelta(days=days)


def add_weeks(value: date | datetime, weeks: int) -> date:
    return add_days(value, weeks * constants.DAYS_PER_WEEK)


def add_months_clamped(value: date | datetime, months: int, day_preference: int | None = None) -> date:
    """Step ``months`` calendar months, clamping the day to the target month.

    Args:
        value: Starting date
        months: Months to add (may be negative)
        day_preference: Day of month to aim for instead of ``value``'s own day

    Returns:
        The stepped date, e.g. Jan 31 + 1 month -> Feb 28 (or 29 in leap years)
    """
    d = as_date(value)
    target = d + relativedelta(months=months)
    wanted = day_preference if day_preference is not None else d.day
    return target.replace(day=clamp_day(wanted, target.year, target.month))
