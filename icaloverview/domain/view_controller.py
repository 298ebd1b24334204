"""View state machine over {agenda, week, month} plus a reference date.

All state lives in one ``AggregationState`` owned by the controller.
Navigation re-renders from already-fetched data; only ``load`` fetches.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from ..calendar.lite_models import CalendarSource, EventItem, SourceFetchError
from ..core.timezone_utils import today as _today
from ..fetch_orchestrator import FetchOrchestrator
from .view_renderer import RenderedView, ViewMode, render_view

logger = logging.getLogger(__name__)


@dataclass
class AggregationState:
    """Everything one aggregation pass produced plus the current navigation."""

    items: list[EventItem] = field(default_factory=list)
    errors: list[SourceFetchError] = field(default_factory=list)
    source_count: int = 0
    loaded: bool = False
    mode: ViewMode = ViewMode.AGENDA
    reference_date: Optional[datetime.date] = None


class ViewController:
    """Holds view mode and reference date and dispatches navigation."""

    def __init__(
        self,
        display_tz: datetime.tzinfo | None = None,
        today_provider: Optional[Callable[[datetime.tzinfo | None], datetime.date]] = None,
        initial_mode: ViewMode = ViewMode.AGENDA,
    ) -> None:
        self.display_tz = display_tz
        self._today_provider = today_provider or _today
        self.state = AggregationState(mode=ViewMode(initial_mode))

    def today(self) -> datetime.date:
        return self._today_provider(self.display_tz)

    @property
    def reference_date(self) -> datetime.date:
        return self.state.reference_date or self.today()

    async def load(
        self, orchestrator: FetchOrchestrator, sources: list[CalendarSource]
    ) -> RenderedView:
        """Run one aggregation pass and replace the fetched data.

        The new data is swapped in only after every fetch completed, so
        navigation in between keeps seeing the previous pass.
        """
        result = await orchestrator.aggregate(sources)
        self.state.items = result.items
        self.state.errors = result.errors
        self.state.source_count = result.source_count
        self.state.loaded = True
        return self.render()

    def switch_view(self, mode: ViewMode | str) -> RenderedView:
        """Set the view mode; entering week or month resets the reference to today."""
        mode = ViewMode(mode)
        self.state.mode = mode
        if mode is not ViewMode.AGENDA:
            self.state.reference_date = self.today()
        logger.debug("Switched view to %s", mode.value)
        return self.render()

    def shift_reference(self, delta: int) -> RenderedView:
        """Move the window by ``delta`` weeks or months; no-op in agenda.

        A shift past the supported date range leaves the reference unchanged.
        """
        mode = self.state.mode
        previous = self.state.reference_date
        try:
            if mode is ViewMode.WEEK:
                self.state.reference_date = self.reference_date + datetime.timedelta(
                    days=7 * delta
                )
            elif mode is ViewMode.MONTH:
                # relativedelta clamps the day to the target month's length
                self.state.reference_date = self.reference_date + relativedelta(months=delta)
            # Grid padding can still run past the last representable date
            return self.render()
        except (ValueError, OverflowError):
            logger.warning("Ignoring shift by %d: outside the supported date range", delta)
            self.state.reference_date = previous
            return self.render()

    def jump_to_today(self) -> RenderedView:
        self.state.reference_date = self.today()
        return self.render()

    def render(self) -> RenderedView:
        return render_view(
            self.state.mode,
            self.state.items,
            self.reference_date,
            errors=self.state.errors,
            source_count=self.state.source_count,
            tz=self.display_tz,
            today=self.today(),
            loading=not self.state.loaded,
        )
