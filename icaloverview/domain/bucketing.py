"""Temporal bucketing: day keys, week/month windows and grid partitions.

All grouping is by the local calendar date of an item's start instant in the
display zone (process-local when no zone is given).
"""

from __future__ import annotations

import calendar
import datetime
from collections import defaultdict
from dataclasses import dataclass, field

from ..calendar.lite_datetime_utils import day_key_for_date
from ..calendar.lite_models import EventItem

DAYS_PER_WEEK = 7


@dataclass
class GridDay:
    """One cell of a week or month grid."""

    date: datetime.date
    items: list[EventItem] = field(default_factory=list)
    outside: bool = False

    @property
    def day_key(self) -> str:
        return day_key_for_date(self.date)


@dataclass
class DayGroup:
    """All items of one calendar day in agenda order."""

    day_key: str
    date: datetime.date
    items: list[EventItem] = field(default_factory=list)


def week_start(reference: datetime.date) -> datetime.date:
    """Monday on or before ``reference``."""
    return reference - datetime.timedelta(days=reference.weekday())


def iso_week_number(day: datetime.date) -> int:
    return day.isocalendar()[1]


def week_window(reference: datetime.date) -> list[datetime.date]:
    """The 7 consecutive days of the ISO week containing ``reference``."""
    start = week_start(reference)
    return [start + datetime.timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


def month_bounds(reference: datetime.date) -> tuple[datetime.date, datetime.date]:
    """First and last calendar day of the month containing ``reference``."""
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=1), reference.replace(day=last_day)


def month_grid_days(reference: datetime.date) -> list[datetime.date]:
    """Month days padded to whole Monday-to-Sunday weeks."""
    first, last = month_bounds(reference)
    grid_start = week_start(first)
    grid_end = last + datetime.timedelta(days=DAYS_PER_WEEK - 1 - last.weekday())
    span = (grid_end - grid_start).days + 1
    return [grid_start + datetime.timedelta(days=offset) for offset in range(span)]


def item_day_key(item: EventItem, tz: datetime.tzinfo | None = None) -> str | None:
    start = item.start
    return start.day_key(tz) if start is not None else None


def index_by_day(
    items: list[EventItem], tz: datetime.tzinfo | None = None
) -> dict[str, list[EventItem]]:
    """Group items by day key, keeping their incoming order within a day.

    Items without a start cannot be placed and are left out.
    """
    index: dict[str, list[EventItem]] = defaultdict(list)
    for item in items:
        key = item_day_key(item, tz)
        if key is not None:
            index[key].append(item)
    return dict(index)


def _sorted_by_start(items: list[EventItem], tz: datetime.tzinfo | None) -> list[EventItem]:
    # sorted() is stable, so equal starts keep combination order
    return sorted(items, key=lambda item: item.start.sort_key(tz) if item.start else 0.0)


def group_agenda(items: list[EventItem], tz: datetime.tzinfo | None = None) -> list[DayGroup]:
    """Agenda partition: every item, grouped per day, days ascending.

    Within a day items keep the order of the (already chronologically
    sorted) combined list.
    """
    index = index_by_day(items, tz)
    return [
        DayGroup(day_key=key, date=datetime.date.fromisoformat(key), items=index[key])
        for key in sorted(index)
    ]


def bucket_days(
    items: list[EventItem],
    days: list[datetime.date],
    tz: datetime.tzinfo | None = None,
    month: tuple[int, int] | None = None,
) -> list[GridDay]:
    """Assign items to the given grid days, each day sorted by start.

    Args:
        items: Combined event list
        days: Grid days in display order
        tz: Display zone
        month: (year, month) of the target month; days outside it are marked
    """
    index = index_by_day(items, tz)
    cells = []
    for day in days:
        outside = month is not None and (day.year, day.month) != month
        day_items = _sorted_by_start(index.get(day_key_for_date(day), []), tz)
        cells.append(GridDay(date=day, items=day_items, outside=outside))
    return cells


def bucket_week(
    items: list[EventItem], reference: datetime.date, tz: datetime.tzinfo | None = None
) -> list[GridDay]:
    return bucket_days(items, week_window(reference), tz)


def bucket_month(
    items: list[EventItem], reference: datetime.date, tz: datetime.tzinfo | None = None
) -> list[list[GridDay]]:
    """Month grid as rows of 7 cells, Monday first."""
    cells = bucket_days(
        items, month_grid_days(reference), tz, month=(reference.year, reference.month)
    )
    return [cells[row : row + DAYS_PER_WEEK] for row in range(0, len(cells), DAYS_PER_WEEK)]
