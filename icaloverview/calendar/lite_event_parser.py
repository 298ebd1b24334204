"""VEVENT extraction from unfolded ICS lines.

Parsing anomalies (unknown properties, lines outside VEVENT blocks, dangling
END markers, bad dates) are absorbed here and never raised.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, NamedTuple, Optional

from .ics_lines import unfold_lines
from .lite_datetime_utils import parse_ics_date
from .lite_models import RawEvent

logger = logging.getLogger(__name__)

BEGIN_VEVENT = "BEGIN:VEVENT"
END_VEVENT = "END:VEVENT"


class PropertyTag(str, Enum):
    """Recognized VEVENT properties."""

    SUMMARY = "summary"
    DESCRIPTION = "description"
    LOCATION = "location"
    START = "start"
    END = "end"
    UNKNOWN = "unknown"


class DecodedProperty(NamedTuple):
    tag: PropertyTag
    name: str
    value: str


def tag_for_name(name: str) -> PropertyTag:
    """Map a bare property name to its tag.

    DTSTART/DTEND match by prefix so parameterized forms such as
    ``DTSTART;VALUE=DATE`` still resolve even without splitting.
    """
    if name == "SUMMARY":
        return PropertyTag.SUMMARY
    if name == "DESCRIPTION":
        return PropertyTag.DESCRIPTION
    if name == "LOCATION":
        return PropertyTag.LOCATION
    if name.startswith("DTSTART"):
        return PropertyTag.START
    if name.startswith("DTEND"):
        return PropertyTag.END
    return PropertyTag.UNKNOWN


def decode_property(line: str) -> DecodedProperty:
    """Split a logical line into tag, bare name and value.

    Parameters after the first semicolon (``;TZID=...``, ``;VALUE=DATE``)
    are dropped.
    """
    descriptor, sep, value = line.partition(":")
    if not sep:
        return DecodedProperty(PropertyTag.UNKNOWN, descriptor, "")
    name = descriptor.split(";", 1)[0]
    return DecodedProperty(tag_for_name(name), name, value)


def extract_events(lines: Iterable[str]) -> list[RawEvent]:
    """Walk logical lines and build one RawEvent per VEVENT block.

    Args:
        lines: Unfolded logical lines

    Returns:
        Events in file order
    """
    events: list[RawEvent] = []
    current: Optional[dict[str, Any]] = None

    for line in lines:
        if line.startswith(BEGIN_VEVENT):
            if current is not None:
                logger.debug("Nested BEGIN:VEVENT; discarding unterminated event")
            current = {}
            continue
        if line.startswith(END_VEVENT):
            if current is None:
                logger.debug("END:VEVENT without matching BEGIN:VEVENT ignored")
            else:
                events.append(RawEvent(**current))
            current = None
            continue
        if current is None:
            continue

        prop = decode_property(line)
        if prop.tag is PropertyTag.SUMMARY:
            current["summary"] = prop.value
        elif prop.tag is PropertyTag.DESCRIPTION:
            current["description"] = prop.value
        elif prop.tag is PropertyTag.LOCATION:
            current["location"] = prop.value
        elif prop.tag is PropertyTag.START:
            current["start_raw"] = prop.value
            current["start"] = parse_ics_date(prop.value)
        elif prop.tag is PropertyTag.END:
            current["end_raw"] = prop.value
            current["end"] = parse_ics_date(prop.value)

    if current is not None:
        logger.debug("Calendar ended inside an open VEVENT; event dropped")

    return events


def parse_ics_events(text: str) -> list[RawEvent]:
    """Unfold and extract all events from raw ICS text."""
    events = extract_events(unfold_lines(text))
    logger.debug("Extracted %d events from %d characters of ICS", len(events), len(text))
    return events
