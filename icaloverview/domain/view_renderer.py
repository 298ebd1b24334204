"""Presentational trees for the agenda, week and month views.

The renderer produces a tree of ``ViewNode`` values that the DOM shell turns
into markup. Field visibility is applied per item from its own source, so one
source's switches never affect another source's events.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..calendar.lite_models import EventItem, SourceFetchError
from .bucketing import (
    GridDay,
    bucket_month,
    bucket_week,
    group_agenda,
    iso_week_number,
    week_start,
)

MONTH_CELL_CAP = 3

WEEKDAY_ABBREVIATIONS = ("ma", "di", "wo", "do", "vr", "za", "zo")
MONTH_NAMES = (
    "januari",
    "februari",
    "maart",
    "april",
    "mei",
    "juni",
    "juli",
    "augustus",
    "september",
    "oktober",
    "november",
    "december",
)

AGENDA_RANGE_LABEL = "Alle agenda's gecombineerd"
NO_SOURCES_MESSAGE = (
    "Er zijn nog geen iCal-links geconfigureerd. Ga eerst naar de iCal Admin-pagina."
)
NO_EVENTS_MESSAGE = "Geen events gevonden in de geconfigureerde agenda's."
LOADING_MESSAGE = "Agenda’s worden geladen…"
NO_VISIBLE_FIELDS_MESSAGE = "Geen zichtbare velden voor dit item."


class ViewMode(str, Enum):
    AGENDA = "agenda"
    WEEK = "week"
    MONTH = "month"


class ViewNode(BaseModel):
    """One node of the presentational tree."""

    kind: str
    text: str = ""
    children: list["ViewNode"] = Field(default_factory=list)
    attrs: dict[str, Any] = Field(default_factory=dict)


class RenderedView(BaseModel):
    """A complete view as handed to the DOM shell."""

    mode: ViewMode
    range_label: str
    reference_date: Optional[datetime.date] = None
    root: ViewNode


# Formatting


def format_date(day: datetime.date) -> str:
    return f"{day.day:02d}-{day.month:02d}-{day.year:04d}"


def format_day_label(day: datetime.date) -> str:
    """E.g. ``za 14-06-2025``."""
    return f"{WEEKDAY_ABBREVIATIONS[day.weekday()]} {format_date(day)}"


def format_short_day_label(day: datetime.date) -> str:
    """E.g. ``ma 08-09``."""
    return f"{WEEKDAY_ABBREVIATIONS[day.weekday()]} {day.day:02d}-{day.month:02d}"


def format_clock(moment: datetime.datetime) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def format_time_range(item: EventItem, tz: datetime.tzinfo | None = None) -> Optional[str]:
    """Time text for an item according to its source's start/end switches.

    Start and end are joined only when both are visible. An end on another
    calendar day than the start carries its date.
    """
    visibility = item.source.visibility
    start = item.start.local_datetime(tz) if item.start is not None else None
    end = item.end.local_datetime(tz) if item.end is not None else None

    start_text = format_clock(start) if visibility.start and start is not None else None
    end_text = None
    if visibility.end and end is not None:
        end_text = format_clock(end)
        if start is None or end.date() != start.date():
            end_text = f"{format_date(end.date())} {end_text}"

    if start_text and end_text:
        return f"{start_text} - {end_text}"
    return start_text or end_text


def week_range_label(reference: datetime.date) -> str:
    """E.g. ``Week 37: 08-09-2025 t/m 14-09-2025``."""
    start = week_start(reference)
    end = start + datetime.timedelta(days=6)
    return f"Week {iso_week_number(start)}: {format_date(start)} t/m {format_date(end)}"


def month_range_label(reference: datetime.date) -> str:
    """E.g. ``september 2025``."""
    return f"{MONTH_NAMES[reference.month - 1]} {reference.year}"


# Event entries


def _source_attrs(item: EventItem) -> dict[str, Any]:
    return {"source_id": item.source.id}


def agenda_entry(item: EventItem, tz: datetime.tzinfo | None = None) -> ViewNode:
    """Full entry; a placeholder line stands in when every field is hidden."""
    visibility = item.source.visibility
    event = item.event
    fields: list[ViewNode] = []

    if visibility.summary and event.summary:
        fields.append(ViewNode(kind="title", text=event.summary))
    time_text = format_time_range(item, tz)
    if time_text:
        fields.append(ViewNode(kind="time", text=time_text))
    if visibility.location and event.location:
        fields.append(ViewNode(kind="location", text=f"Locatie: {event.location}"))
    if visibility.description and event.description:
        fields.append(ViewNode(kind="description", text=event.description))

    if not fields:
        fields.append(ViewNode(kind="meta", text=NO_VISIBLE_FIELDS_MESSAGE))

    children = [ViewNode(kind="source", text=item.source_name), *fields]
    return ViewNode(kind="event", children=children, attrs=_source_attrs(item))


def compact_entry(item: EventItem, tz: datetime.tzinfo | None = None) -> Optional[ViewNode]:
    """Grid entry with time, title and location; None when nothing is visible."""
    visibility = item.source.visibility
    event = item.event
    fields: list[ViewNode] = []

    time_text = format_time_range(item, tz)
    if time_text:
        fields.append(ViewNode(kind="time", text=time_text))
    if visibility.summary and event.summary:
        fields.append(ViewNode(kind="title", text=event.summary))
    if visibility.location and event.location:
        fields.append(ViewNode(kind="location", text=event.location))

    if not fields:
        return None
    return ViewNode(kind="event", children=fields, attrs=_source_attrs(item))


# Views


def _day_attrs(cell: GridDay, today: Optional[datetime.date]) -> dict[str, Any]:
    return {
        "day_key": cell.day_key,
        "outside": cell.outside,
        "today": today is not None and cell.date == today,
        "count": len(cell.items),
    }


def render_agenda(items: list[EventItem], tz: datetime.tzinfo | None = None) -> list[ViewNode]:
    return [
        ViewNode(
            kind="day",
            text=format_day_label(group.date),
            children=[agenda_entry(item, tz) for item in group.items],
            attrs={"day_key": group.day_key},
        )
        for group in group_agenda(items, tz)
    ]


def render_week(
    items: list[EventItem],
    reference: datetime.date,
    tz: datetime.tzinfo | None = None,
    today: Optional[datetime.date] = None,
) -> list[ViewNode]:
    days = []
    for cell in bucket_week(items, reference, tz):
        entries = [node for node in (compact_entry(item, tz) for item in cell.items) if node]
        days.append(
            ViewNode(
                kind="day",
                text=format_short_day_label(cell.date),
                children=entries,
                attrs=_day_attrs(cell, today),
            )
        )
    return [ViewNode(kind="week", children=days)]


def render_month_cell(
    cell: GridDay, tz: datetime.tzinfo | None = None, today: Optional[datetime.date] = None
) -> ViewNode:
    """Day cell capped at MONTH_CELL_CAP entries plus a "+N more" line.

    N counts every item of the day beyond the cap, including items whose
    fields are all hidden.
    """
    shown = cell.items[:MONTH_CELL_CAP]
    children = [node for node in (compact_entry(item, tz) for item in shown) if node]
    overflow = len(cell.items) - MONTH_CELL_CAP
    if overflow > 0:
        children.append(ViewNode(kind="more", text=f"+{overflow} more"))
    return ViewNode(
        kind="day",
        text=str(cell.date.day),
        children=children,
        attrs=_day_attrs(cell, today),
    )


def render_month(
    items: list[EventItem],
    reference: datetime.date,
    tz: datetime.tzinfo | None = None,
    today: Optional[datetime.date] = None,
) -> list[ViewNode]:
    header = ViewNode(
        kind="header",
        children=[ViewNode(kind="weekday", text=name) for name in WEEKDAY_ABBREVIATIONS],
    )
    rows = [
        ViewNode(kind="week", children=[render_month_cell(cell, tz, today) for cell in row])
        for row in bucket_month(items, reference, tz)
    ]
    return [header, *rows]


def range_label(mode: ViewMode, reference: datetime.date) -> str:
    if mode is ViewMode.WEEK:
        return week_range_label(reference)
    if mode is ViewMode.MONTH:
        return month_range_label(reference)
    return AGENDA_RANGE_LABEL


def render_view(
    mode: ViewMode,
    items: list[EventItem],
    reference: datetime.date,
    errors: Optional[list[SourceFetchError]] = None,
    source_count: int = 0,
    tz: datetime.tzinfo | None = None,
    today: Optional[datetime.date] = None,
    loading: bool = False,
) -> RenderedView:
    """Render one of the three views from already-fetched data.

    Empty configuration and zero events produce distinct ``empty`` nodes;
    each failed source adds one ``error`` node ahead of the view body.
    """
    mode = ViewMode(mode)
    children: list[ViewNode] = [
        ViewNode(kind="error", text=error.describe(), attrs={"source_id": error.source_id})
        for error in errors or []
    ]

    if loading:
        children.append(ViewNode(kind="loading", text=LOADING_MESSAGE))
    elif source_count == 0:
        children.append(
            ViewNode(kind="empty", text=NO_SOURCES_MESSAGE, attrs={"reason": "no_sources"})
        )
    elif not items:
        children.append(
            ViewNode(kind="empty", text=NO_EVENTS_MESSAGE, attrs={"reason": "no_events"})
        )
    elif mode is ViewMode.AGENDA:
        children.extend(render_agenda(items, tz))
    elif mode is ViewMode.WEEK:
        children.extend(render_week(items, reference, tz, today))
    else:
        children.extend(render_month(items, reference, tz, today))

    return RenderedView(
        mode=mode,
        range_label=range_label(mode, reference),
        reference_date=None if mode is ViewMode.AGENDA else reference,
        root=ViewNode(kind=mode.value, children=children),
    )
