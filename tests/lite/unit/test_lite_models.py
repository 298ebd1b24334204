"""Unit tests for icaloverview.calendar.lite_models."""

import pytest
from pydantic import ValidationError

from icaloverview.calendar.lite_models import (
    DEFAULT_PROXY_CONTENT_TYPE,
    CalendarSource,
    FieldVisibility,
    ProxyResponse,
    SourceFetchError,
    SourceFetchResult,
)

pytestmark = [pytest.mark.unit, pytest.mark.fast]


class TestFieldVisibility:
    def test_defaults_hide_only_description(self) -> None:
        visibility = FieldVisibility()

        assert visibility.summary
        assert visibility.location
        assert visibility.start
        assert visibility.end
        assert not visibility.description

    def test_null_flags_take_defaults(self) -> None:
        visibility = FieldVisibility.model_validate(
            {"summary": None, "description": None, "end": False}
        )

        assert visibility.summary
        assert not visibility.description
        assert not visibility.end


class TestCalendarSource:
    def test_accepts_legacy_record_keys(self) -> None:
        source = CalendarSource.model_validate(
            {
                "id": "fam",
                "naam": "Familie",
                "url": "https://example.com/fam.ics",
                "fields": {"description": True, "location": False},
            }
        )

        assert source.name == "Familie"
        assert source.visibility.description
        assert not source.visibility.location

    def test_display_name_falls_back_when_blank(self) -> None:
        assert CalendarSource(id="a", name="   ").display_name == "Kalender"
        assert CalendarSource(id="b", name=" Sport ").display_name == "Sport"

    def test_numeric_id_is_stored_as_text(self) -> None:
        source = CalendarSource.model_validate({"id": 1, "naam": "Werk"})

        assert source.id == "1"

    def test_source_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            CalendarSource.model_validate({"name": "Zonder id"})

    def test_source_is_immutable(self) -> None:
        source = CalendarSource(id="a", name="A")

        with pytest.raises(ValidationError):
            source.name = "B"


class TestSourceFetchError:
    def test_describe_prefers_status_code(self) -> None:
        error = SourceFetchError(source_id="w", source_name="Werk", status_code=404, message="x")

        assert error.describe() == "Kon Werk niet laden (HTTP 404)."

    def test_describe_uses_message_without_status(self) -> None:
        error = SourceFetchError(source_id="w", source_name="Werk", message="ongeldige URL")

        assert error.describe() == "Kon Werk niet laden (ongeldige URL)."

    def test_describe_without_detail(self) -> None:
        error = SourceFetchError(source_id="w", source_name="Werk")

        assert error.describe() == "Kon Werk niet laden (onbekende fout)."


def test_proxy_response_ok_only_for_2xx() -> None:
    assert ProxyResponse(status_code=200).ok
    assert ProxyResponse(status_code=204).ok
    assert not ProxyResponse(status_code=301).ok
    assert not ProxyResponse(status_code=500).ok
    assert ProxyResponse(status_code=200).content_type == DEFAULT_PROXY_CONTENT_TYPE


def test_fetch_result_success_reflects_error() -> None:
    source = CalendarSource(id="a")
    error = SourceFetchError(source_id="a", source_name="Kalender", status_code=500)

    assert SourceFetchResult(source=source).success
    assert not SourceFetchResult(source=source, error=error).success


def test_proxy_response_raw_body_prefers_upstream_bytes() -> None:
    latin1 = ProxyResponse(status_code=200, body="Café", content="Café".encode("latin-1"))

    assert latin1.raw_body() == b"Caf\xe9"
    assert ProxyResponse(status_code=200, body="Café").raw_body() == "Café".encode("utf-8")
