"""Data models for calendar sources, extracted events and fetch results."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .lite_datetime_utils import TimeInstant

DEFAULT_SOURCE_NAME = "Kalender"
DEFAULT_PROXY_CONTENT_TYPE = "text/calendar; charset=utf-8"


class FieldVisibility(BaseModel):
    """Per-source switches for which event fields are shown.

    Summary, location, start and end are shown unless switched off;
    description is hidden unless switched on.
    """

    summary: bool = True
    description: bool = False
    location: bool = True
    start: bool = True
    end: bool = True

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_null_flags(cls, data: Any) -> Any:
        # Stored records may carry explicit nulls; those take the default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class CalendarSource(BaseModel):
    """A configured ICS feed, read-only for one aggregation pass."""

    id: str = Field(..., description="Stable source identifier")
    name: str = Field(
        default="",
        validation_alias=AliasChoices("name", "naam"),
        description="Human-readable name for this calendar source",
    )
    url: str = Field(default="", description="ICS calendar URL")
    visibility: FieldVisibility = Field(
        default_factory=FieldVisibility,
        validation_alias=AliasChoices("visibility", "fields"),
        description="Which event fields are shown for this source",
    )

    # Stored records may carry numeric ids
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    @property
    def display_name(self) -> str:
        return self.name.strip() or DEFAULT_SOURCE_NAME


class RawEvent(BaseModel):
    """Fields extracted from one VEVENT block."""

    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_raw: Optional[str] = None
    start: Optional[TimeInstant] = None
    end_raw: Optional[str] = None
    end: Optional[TimeInstant] = None

    @property
    def has_start(self) -> bool:
        return self.start is not None


class EventItem(BaseModel):
    """An event paired with the source it came from."""

    event: RawEvent
    source: CalendarSource
    source_name: str

    @property
    def start(self) -> Optional[TimeInstant]:
        return self.event.start

    @property
    def end(self) -> Optional[TimeInstant]:
        return self.event.end


class ProxyResponse(BaseModel):
    """Upstream response relayed by the proxy collaborator."""

    status_code: int
    body: str = ""
    content: Optional[bytes] = None
    content_type: str = DEFAULT_PROXY_CONTENT_TYPE

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def raw_body(self) -> bytes:
        """Upstream bytes as received; falls back to the UTF-8 encoded text."""
        if self.content is not None:
            return self.content
        return self.body.encode("utf-8")


class SourceFetchError(BaseModel):
    """A per-source load failure, collected rather than raised."""

    source_id: str
    source_name: str
    status_code: Optional[int] = None
    message: str = ""

    def describe(self) -> str:
        """User-facing line for this failure."""
        reason = f"HTTP {self.status_code}" if self.status_code is not None else self.message
        reason = reason or "onbekende fout"
        return f"Kon {self.source_name} niet laden ({reason})."


class SourceFetchResult(BaseModel):
    """Outcome of fetching one source: items or an error, never both."""

    source: CalendarSource
    items: list[EventItem] = Field(default_factory=list)
    error: Optional[SourceFetchError] = None

    @property
    def success(self) -> bool:
        return self.error is None


class AggregationResult(BaseModel):
    """Combined outcome of one aggregation pass over all sources."""

    items: list[EventItem] = Field(default_factory=list)
    errors: list[SourceFetchError] = Field(default_factory=list)
    source_count: int = 0
