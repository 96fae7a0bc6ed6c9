"""Date and time utilities."""

from datetime import date, datetime, timedelta, timezone
from email.utils import format_datetime as format_rfc2822
from typing import List, Optional, Union

from dateutil import parser as date_parser


def parse_date(date_string: Optional[str]) -> Optional[datetime]:
    """Parse date string to a timezone-aware datetime.

    Handles the formats commonly found in feeds and APIs (RFC 822,
    ISO-8601, epoch-less free text understood by dateutil).

    Args:
        date_string: Date string to parse

    Returns:
        Parsed datetime (UTC if the input was naive) or None if parsing fails
    """
    if not date_string:
        return None

    try:
        dt = date_parser.parse(date_string)
    except (ValueError, TypeError, OverflowError):
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt


def now_utc() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current UTC datetime (timezone-aware)
    """
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Render a datetime as an ISO-8601 UTC string with a trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def from_timestamp(seconds: Union[int, float]) -> datetime:
    """Convert a Unix timestamp in seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def is_within_hours(dt: datetime, hours: int, now: Optional[datetime] = None) -> bool:
    """Check if datetime is within specified hours from now.

    Args:
        dt: Datetime to check
        hours: Number of hours
        now: Reference time (defaults to current UTC time)

    Returns:
        True if datetime is within hours from now
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    cutoff = (now or now_utc()) - timedelta(hours=hours)
    return dt >= cutoff


def utc_today() -> date:
    """Get the current calendar date in UTC."""
    return now_utc().date()


def last_n_dates(days: int, today: Optional[date] = None) -> List[str]:
    """List the last N calendar dates as ISO strings, oldest first.

    Args:
        days: Window length, today inclusive
        today: End of the window (defaults to the current UTC date)

    Returns:
        ISO date strings from ``today - (days - 1)`` up to ``today``
    """
    end = today or utc_today()
    return [(end - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]


def format_rfc822(dt: datetime) -> str:
    """Format a datetime for RSS ``pubDate`` / ``lastBuildDate`` fields."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_rfc2822(dt.astimezone(timezone.utc), usegmt=True)


def format_datetime(dt: datetime, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format datetime to string.

    Args:
        dt: Datetime to format
        format_str: Format string

    Returns:
        Formatted datetime string
    """
    return dt.strftime(format_str)


def days_since(dt: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since a datetime, never negative."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max((now or now_utc()) - dt, timedelta(0)).days
