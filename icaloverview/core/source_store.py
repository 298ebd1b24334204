"""Read-only access to configured calendar sources.

The core never writes to the store; a source list is read once per
aggregation pass and treated as immutable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from ..calendar.lite_models import CalendarSource

logger = logging.getLogger(__name__)


class SourceStoreError(Exception):
    """The source configuration could not be read or is invalid."""


class SourceStore(Protocol):
    """Anything that can list the configured sources in display order."""

    async def list_sources(self) -> list[CalendarSource]: ...


def sources_from_records(records: list[Any]) -> list[CalendarSource]:
    """Validate raw source records into CalendarSource values.

    Records without an ``id`` get a positional one so ordering stays stable.

    Raises:
        SourceStoreError: If a record is not a mapping or fails validation
    """
    sources: list[CalendarSource] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise SourceStoreError(f"Source #{index + 1} is not a mapping: {record!r}")
        data = dict(record)
        data.setdefault("id", f"source-{index + 1}")
        try:
            sources.append(CalendarSource.model_validate(data))
        except ValidationError as e:
            raise SourceStoreError(f"Invalid source #{index + 1}: {e}") from e
    return sources


class StaticSourceStore:
    """In-memory store, used when sources are supplied directly."""

    def __init__(self, sources: list[CalendarSource] | None = None) -> None:
        self._sources = list(sources or [])

    async def list_sources(self) -> list[CalendarSource]:
        return list(self._sources)


class YamlSourceStore:
    """Sources from a YAML (or JSON) file, re-read on every call.

    Accepts either a bare list of records or a mapping with a ``sources`` key.
    A missing file means no sources are configured.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> list[CalendarSource]:
        if not self.path.exists():
            logger.warning("Sources file %s does not exist; no sources configured", self.path)
            return []

        try:
            with self.path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SourceStoreError(f"Cannot read sources file {self.path}: {e}") from e

        if not data:
            return []
        if isinstance(data, dict):
            data = data.get("sources") or []
        if not isinstance(data, list):
            raise SourceStoreError(f"Sources file {self.path} must contain a list of sources")

        sources = sources_from_records(data)
        logger.debug("Loaded %d sources from %s", len(sources), self.path)
        return sources

    async def list_sources(self) -> list[CalendarSource]:
        return self.load()
