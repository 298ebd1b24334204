"""Date/time interpretation for ICS date and date-time tokens.

Only the two basic value shapes are understood: ``YYYYMMDD`` and
``YYYYMMDDTHHMMSS``, each optionally followed by a ``Z`` UTC marker.
Anything else yields ``None`` rather than raising, so callers can keep the
owning property as present-but-unparseable.
"""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Optional

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

_ICS_DATE_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})(T(\d{2})(\d{2})(\d{2}))?(Z)?$")


@dataclass(frozen=True)
class TimeInstant:
    """An interpreted ICS date token.

    Floating instants keep a naive wall-clock datetime that is read in the
    viewer's zone as-is. UTC instants keep an aware datetime in UTC and are
    converted to the viewer's zone when a calendar date is needed.
    """

    value: datetime
    is_utc: bool = False

    @property
    def is_floating(self) -> bool:
        return not self.is_utc

    def local_datetime(self, tz: Optional[tzinfo] = None) -> datetime:
        """Return the naive wall-clock datetime in the viewer's zone.

        Args:
            tz: Display zone; None means the process-local zone
        """
        if not self.is_utc:
            return self.value
        return self.value.astimezone(tz).replace(tzinfo=None)

    def local_date(self, tz: Optional[tzinfo] = None) -> date:
        return self.local_datetime(tz).date()

    def day_key(self, tz: Optional[tzinfo] = None) -> str:
        return day_key_for_date(self.local_date(tz))

    def sort_key(self, tz: Optional[tzinfo] = None) -> float:
        """Absolute ordering key so floating and UTC instants sort together."""
        if self.is_utc:
            return self.value.timestamp()
        if tz is not None:
            return self.value.replace(tzinfo=tz).timestamp()
        # Naive datetimes are read in the process-local zone
        return self.value.timestamp()


def parse_ics_date(token: Optional[str]) -> Optional[TimeInstant]:
    """Interpret an ICS date or date-time token.

    Args:
        token: Raw property value such as ``20250615`` or ``20250615T143000Z``

    Returns:
        TimeInstant, or None when the token does not have the expected shape

    Examples:
        >>> parse_ics_date("20250615").value
        datetime.datetime(2025, 6, 15, 0, 0)
        >>> parse_ics_date("20250615T143000Z").is_utc
        True
        >>> parse_ics_date("not-a-date") is None
        True
    """
    if not token:
        return None

    match = _ICS_DATE_PATTERN.match(token)
    if match is None:
        logger.debug("Unparseable ICS date token: %r", token)
        return None

    year, month, day = int(match.group(1)), int(match.group(2)), int(match.group(3))
    has_time = match.group(4) is not None
    hour = int(match.group(5)) if has_time else 0
    minute = int(match.group(6)) if has_time else 0
    second = int(match.group(7)) if has_time else 0
    is_utc = match.group(8) is not None

    # Out-of-range fields roll over into the neighbouring unit instead of failing
    try:
        value = datetime(year, 1, 1, tzinfo=UTC if is_utc else None) + relativedelta(
            months=month - 1, days=day - 1, hours=hour, minutes=minute, seconds=second
        )
    except (ValueError, OverflowError):
        logger.debug("ICS date token outside the supported year range: %r", token)
        return None

    return TimeInstant(value=value, is_utc=is_utc)


def day_key_for_date(day: date) -> str:
    """Canonical ``YYYY-MM-DD`` grouping key for a calendar day."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def date_from_day_key(key: str) -> date:
    return date.fromisoformat(key)
