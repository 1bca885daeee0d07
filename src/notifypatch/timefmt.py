"""
Display timestamps for build announcements.

Build times arrive from the API as UTC instants and are shown to users as a
day-first local date string, e.g. "15/1/2025, 17:50:23". The result is a
display value only; nothing parses it back.

Usage:
    from src.notifypatch.timefmt import DisplayClock

    clock = DisplayClock("America/Argentina/Buenos_Aires")
    clock.format_build_time("2025-01-15T20:50:23.000Z")   # "15/1/2025, 17:50:23"
    clock.format_build_time(1736974223000)                # epoch milliseconds
    clock.timestamp()                                     # current time
"""

from datetime import datetime
from typing import Any, Optional

import pytz

TIME_UNAVAILABLE = "Date not available"


class DisplayClock:
    """Converts UTC instants to display strings in one configured timezone."""

    DEFAULT_TIMEZONE = "America/Argentina/Buenos_Aires"

    def __init__(self, timezone: Optional[str] = None):
        """
        Args:
            timezone: pytz timezone name. Defaults to Buenos Aires.

        Raises:
            pytz.UnknownTimeZoneError: If timezone string is invalid
        """
        self._timezone_str = timezone or self.DEFAULT_TIMEZONE
        self._timezone = pytz.timezone(self._timezone_str)

    @property
    def timezone_name(self) -> str:
        return self._timezone_str

    def now(self) -> datetime:
        """Current datetime in the configured timezone."""
        return datetime.now(pytz.UTC).astimezone(self._timezone)

    def from_utc(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC datetime to configured timezone.

        Naive datetimes are assumed to be UTC.
        """
        if utc_dt.tzinfo is None:
            utc_dt = pytz.UTC.localize(utc_dt)
        return utc_dt.astimezone(self._timezone)

    def format(self, dt: datetime) -> str:
        """Format as day/month/year, 24h time without zero-padded date parts."""
        local = self.from_utc(dt)
        return f"{local.day}/{local.month}/{local.year}, {local:%H:%M:%S}"

    def timestamp(self) -> str:
        """Current time as a display string."""
        return self.format(self.now())

    def format_build_time(self, value: Any) -> str:
        """
        Format a build time as returned by the API.

        Args:
            value: ISO-8601 string or epoch milliseconds

        Returns:
            Display string, or a placeholder if the value can't be read
        """
        dt = parse_instant(value)
        if dt is None:
            return TIME_UNAVAILABLE
        return self.format(dt)


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch milliseconds into an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=pytz.UTC)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = pytz.UTC.localize(dt)
        return dt.astimezone(pytz.UTC)

    return None
