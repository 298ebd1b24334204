"""Unit tests for icaloverview.fetch_orchestrator."""

import asyncio
from typing import Any

import pytest

from icaloverview.calendar.lite_models import CalendarSource, ProxyResponse, SourceFetchResult
from icaloverview.fetch_orchestrator import FetchOrchestrator, sort_chronologically
from icaloverview.lite_fetcher import LiteICSFetcher

pytestmark = pytest.mark.unit


def _ics(*events: tuple[str, str]) -> str:
    blocks = "".join(
        f"BEGIN:VEVENT\r\nSUMMARY:{summary}\r\nDTSTART:{start}\r\nEND:VEVENT\r\n"
        for summary, start in events
    )
    return f"BEGIN:VCALENDAR\r\n{blocks}END:VCALENDAR\r\n"


class TestAggregate:
    """Tests for combining sources into one sorted list."""

    @pytest.mark.asyncio
    async def test_failed_source_does_not_block_others(
        self, make_source: Any, fake_proxy_factory: Any, network_error: Exception
    ) -> None:
        broken = make_source("a", "Kapot")
        healthy = make_source("b", "Gezond")
        proxy = fake_proxy_factory(
            {broken.url: network_error, healthy.url: _ics(("Yoga", "20250910T180000"))}
        )

        result = await FetchOrchestrator(LiteICSFetcher(proxy)).aggregate([broken, healthy])

        assert [item.event.summary for item in result.items] == ["Yoga"]
        assert len(result.errors) == 1
        assert result.errors[0].source_name == "Kapot"
        assert result.source_count == 2

    @pytest.mark.asyncio
    async def test_http_failure_reported_once_per_source(
        self, make_source: Any, fake_proxy_factory: Any
    ) -> None:
        first = make_source("a", "Een")
        second = make_source("b", "Twee")
        proxy = fake_proxy_factory(
            {
                first.url: ProxyResponse(status_code=500),
                second.url: ProxyResponse(status_code=403),
            }
        )

        result = await FetchOrchestrator(LiteICSFetcher(proxy)).aggregate([first, second])

        assert result.items == []
        assert [e.describe() for e in result.errors] == [
            "Kon Een niet laden (HTTP 500).",
            "Kon Twee niet laden (HTTP 403).",
        ]

    @pytest.mark.asyncio
    async def test_items_sorted_chronologically_across_sources(
        self, make_source: Any, fake_proxy_factory: Any
    ) -> None:
        work = make_source("work", "Werk")
        home = make_source("home", "Thuis")
        proxy = fake_proxy_factory(
            {
                work.url: _ics(("Stand-up", "20250911T090000"), ("Retro", "20250909T150000")),
                home.url: _ics(("Tandarts", "20250910T080000")),
            }
        )

        result = await FetchOrchestrator(LiteICSFetcher(proxy)).aggregate([work, home])

        assert [item.event.summary for item in result.items] == ["Retro", "Tandarts", "Stand-up"]

    @pytest.mark.asyncio
    async def test_equal_starts_keep_source_order_even_when_first_source_is_slower(
        self, make_source: Any
    ) -> None:
        slow = make_source("slow", "Traag")
        fast = make_source("fast", "Snel")

        class DelayedFetcher(LiteICSFetcher):
            async def fetch_source(self, source: CalendarSource) -> SourceFetchResult:
                if source.id == "slow":
                    await asyncio.sleep(0.05)
                return await super().fetch_source(source)

        class Proxy:
            async def fetch(self, url: str) -> ProxyResponse:
                name = "Traag" if "slow" in url else "Snel"
                return ProxyResponse(status_code=200, body=_ics((name, "20250910T090000")))

        orchestrator = FetchOrchestrator(DelayedFetcher(Proxy()), fetch_concurrency=4)
        result = await orchestrator.aggregate([slow, fast])

        assert [item.event.summary for item in result.items] == ["Traag", "Snel"]

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_source_error(self, make_source: Any) -> None:
        source = make_source("x", "Stuk")

        class ExplodingFetcher(LiteICSFetcher):
            async def fetch_source(self, source: CalendarSource) -> SourceFetchResult:
                raise RuntimeError("boom")

        result = await FetchOrchestrator(ExplodingFetcher(proxy=None)).aggregate([source])

        assert result.items == []
        assert result.errors[0].message == "boom"

    @pytest.mark.asyncio
    async def test_no_sources_yields_empty_result(self, fake_proxy_factory: Any) -> None:
        proxy = fake_proxy_factory({})

        result = await FetchOrchestrator(LiteICSFetcher(proxy)).aggregate([])

        assert result.items == []
        assert result.errors == []
        assert result.source_count == 0
        assert proxy.calls == []


@pytest.mark.parametrize(("requested", "effective"), [(0, 1), (-3, 1), (2, 2), (4, 4), (16, 4)])
def test_fetch_concurrency_is_clamped(requested: int, effective: int) -> None:
    orchestrator = FetchOrchestrator(LiteICSFetcher(proxy=None), fetch_concurrency=requested)

    assert orchestrator.fetch_concurrency == effective


def test_sort_chronologically_is_stable(make_item: Any, make_source: Any) -> None:
    first = make_item("20250910T090000", summary="A", source=make_source("a", "A"))
    second = make_item("20250910T090000", summary="B", source=make_source("b", "B"))
    earlier = make_item("20250909", summary="C")

    ordered = sort_chronologically([first, second, earlier])

    assert [item.event.summary for item in ordered] == ["C", "A", "B"]
