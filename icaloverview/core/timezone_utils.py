"""Time provider and display-timezone helpers for icaloverview."""

from __future__ import annotations

import datetime
import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

TEST_TIME_ENV = "ICALOVERVIEW_TEST_TIME"


class TimeProvider:
    """Source of "now", overridable for tests via ICALOVERVIEW_TEST_TIME."""

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Format of the override: ISO 8601 datetime string
        (e.g. "2025-09-10T09:00:00+02:00"). Naive values are read as UTC.
        """
        test_time = os.environ.get(TEST_TIME_ENV)
        if test_time:
            try:
                dt = date_parser.isoparse(test_time)
            except (ValueError, OverflowError):
                logger.warning("Invalid %s=%r; using real time", TEST_TIME_ENV, test_time)
            else:
                if dt.tzinfo is None:
                    return dt.replace(tzinfo=datetime.UTC)
                return dt.astimezone(datetime.UTC)
        return datetime.datetime.now(datetime.UTC)

    def today(self, tz: datetime.tzinfo | None = None) -> datetime.date:
        """Current calendar date in the display zone (process-local when None)."""
        return self.now_utc().astimezone(tz).date()


_time_provider = TimeProvider()


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function)."""
    return _time_provider.now_utc()


def today(tz: datetime.tzinfo | None = None) -> datetime.date:
    return _time_provider.today(tz)


def resolve_display_timezone(name: str | None) -> datetime.tzinfo | None:
    """Resolve an IANA zone name; None or unknown names mean process-local.

    Args:
        name: IANA timezone identifier such as "Europe/Amsterdam"

    Returns:
        ZoneInfo instance, or None to use the process-local zone
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone %r; using process-local zone", name)
        return None
