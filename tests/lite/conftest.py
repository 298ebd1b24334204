"""Shared fixtures for icaloverview tests."""

from collections.abc import AsyncIterator
from typing import Any, Callable, Optional

import pytest

from icaloverview.calendar.lite_datetime_utils import parse_ics_date
from icaloverview.calendar.lite_models import (
    CalendarSource,
    EventItem,
    FieldVisibility,
    ProxyResponse,
    RawEvent,
)
from icaloverview.core.http_client import close_all_clients
from icaloverview.lite_fetcher import LiteICSFetchError


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients after every test to prevent leaks between loops."""
    yield
    await close_all_clients()


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear icaloverview environment overrides before each test."""
    for name in (
        "ICALOVERVIEW_TEST_TIME",
        "ICALOVERVIEW_SOURCES_FILE",
        "ICALOVERVIEW_WEB_HOST",
        "ICALOVERVIEW_WEB_PORT",
        "ICALOVERVIEW_REQUEST_TIMEOUT",
        "ICALOVERVIEW_FETCH_CONCURRENCY",
        "ICALOVERVIEW_TIMEZONE",
        "ICALOVERVIEW_LOG_LEVEL",
        "ICALOVERVIEW_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_source() -> Callable[..., CalendarSource]:
    """Factory for CalendarSource values with optional visibility overrides."""

    def factory(
        source_id: str = "work", name: str = "Werk", url: str = "", **flags: bool
    ) -> CalendarSource:
        return CalendarSource(
            id=source_id,
            name=name,
            url=url or f"https://calendars.example.com/{source_id}.ics",
            visibility=FieldVisibility(**flags),
        )

    return factory


@pytest.fixture
def make_item(make_source: Callable[..., CalendarSource]) -> Callable[..., EventItem]:
    """Factory for EventItems from ICS date tokens."""

    def factory(
        start: str,
        end: Optional[str] = None,
        summary: Optional[str] = "Overleg",
        location: Optional[str] = None,
        description: Optional[str] = None,
        source: Optional[CalendarSource] = None,
    ) -> EventItem:
        source = source or make_source()
        event = RawEvent(
            summary=summary,
            location=location,
            description=description,
            start_raw=start,
            start=parse_ics_date(start),
            end_raw=end,
            end=parse_ics_date(end) if end else None,
        )
        return EventItem(event=event, source=source, source_name=source.display_name)

    return factory


@pytest.fixture
def sample_ics_simple() -> str:
    """Calendar with two events; the second has no usable start."""
    return (
        "BEGIN:VCALENDAR\r\n"
        "VERSION:2.0\r\n"
        "PRODID:-//icaloverview test//NL\r\n"
        "BEGIN:VEVENT\r\n"
        "UID:event-001@icaloverview.test\r\n"
        "DTSTART:20250910T090000\r\n"
        "DTEND:20250910T100000\r\n"
        "SUMMARY:Teamoverleg\r\n"
        "LOCATION:Kamer 2\r\n"
        "DESCRIPTION:Wekelijkse afstemming\r\n"
        "END:VEVENT\r\n"
        "BEGIN:VEVENT\r\n"
        "UID:event-002@icaloverview.test\r\n"
        "DTSTART;TZID=Europe/Amsterdam:volgende week\r\n"
        "SUMMARY:Onbekend moment\r\n"
        "END:VEVENT\r\n"
        "END:VCALENDAR\r\n"
    )


class FakeProxy:
    """Proxy collaborator returning canned responses per URL."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def fetch(self, url: str) -> ProxyResponse:
        self.calls.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, ProxyResponse):
            return response
        return ProxyResponse(status_code=200, body=response)


@pytest.fixture
def fake_proxy_factory() -> Callable[[dict[str, Any]], FakeProxy]:
    return FakeProxy


@pytest.fixture
def network_error() -> LiteICSFetchError:
    return LiteICSFetchError("netwerkfout: connection refused")
