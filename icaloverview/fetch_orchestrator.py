"""One aggregation pass over all configured sources."""

from __future__ import annotations

import asyncio
import datetime
import logging

from .calendar.lite_models import (
    AggregationResult,
    CalendarSource,
    EventItem,
    SourceFetchError,
    SourceFetchResult,
)
from .core.config_manager import DEFAULT_FETCH_CONCURRENCY, MAX_FETCH_CONCURRENCY
from .lite_fetcher import LiteICSFetcher

logger = logging.getLogger(__name__)


def sort_chronologically(
    items: list[EventItem], tz: datetime.tzinfo | None = None
) -> list[EventItem]:
    """Stable sort by start instant; equal starts keep combination order."""
    return sorted(items, key=lambda item: item.start.sort_key(tz) if item.start else 0.0)


class FetchOrchestrator:
    """Fetches all sources with bounded concurrency and combines the results."""

    def __init__(
        self,
        fetcher: LiteICSFetcher,
        fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY,
        display_tz: datetime.tzinfo | None = None,
    ) -> None:
        """Initialize fetch orchestrator.

        Args:
            fetcher: Per-source fetcher
            fetch_concurrency: Maximum number of concurrent fetches (clamped 1-4)
            display_tz: Zone used to order floating instants; None is process-local
        """
        self.fetcher = fetcher
        self.fetch_concurrency = max(1, min(int(fetch_concurrency), MAX_FETCH_CONCURRENCY))
        self.display_tz = display_tz

    async def _fetch_guarded(
        self, semaphore: asyncio.Semaphore, source: CalendarSource
    ) -> SourceFetchResult:
        async with semaphore:
            try:
                return await self.fetcher.fetch_source(source)
            except Exception as e:
                # One misbehaving source must not take the whole pass down
                logger.exception("Unexpected failure fetching source %r", source.display_name)
                error = SourceFetchError(
                    source_id=source.id,
                    source_name=source.display_name,
                    message=str(e) or type(e).__name__,
                )
                return SourceFetchResult(source=source, error=error)

    async def aggregate(self, sources: list[CalendarSource]) -> AggregationResult:
        """Fetch every source and build the combined, chronologically sorted list.

        Results are combined in source-list order, not completion order, so
        ties on equal start instants go to the earlier source.

        Args:
            sources: Sources in display order

        Returns:
            AggregationResult with items, per-source errors and the source count
        """
        if not sources:
            logger.info("No sources configured, skipping fetch")
            return AggregationResult()

        semaphore = asyncio.Semaphore(self.fetch_concurrency)
        results = await asyncio.gather(*(self._fetch_guarded(semaphore, src) for src in sources))

        combined: list[EventItem] = []
        errors: list[SourceFetchError] = []
        for result in results:
            if result.error is not None:
                errors.append(result.error)
            else:
                combined.extend(result.items)

        items = sort_chronologically(combined, self.display_tz)
        logger.info(
            "Aggregated %d events from %d sources (%d failed)",
            len(items),
            len(sources),
            len(errors),
        )
        return AggregationResult(items=items, errors=errors, source_count=len(sources))
