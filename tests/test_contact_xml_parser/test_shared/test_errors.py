"""Tests for the error taxonomy and diagnostic types."""

import pytest

from contact_xml_parser.shared import (
    ContactParseError,
    DepthExceededError,
    DiagnosticEntry,
    DiagnosticSeverity,
    EmptyInputError,
    ErrorKind,
    FieldTooLongError,
    IncompleteDocumentError,
    MalformedXMLError,
    PerformanceMetrics,
    SourceUnavailableError,
)


class TestErrorKinds:
    """Test that each exception carries its kind."""

    @pytest.mark.parametrize(
        "error_class,kind",
        [
            (MalformedXMLError, ErrorKind.MALFORMED_XML),
            (IncompleteDocumentError, ErrorKind.INCOMPLETE_DOCUMENT),
            (DepthExceededError, ErrorKind.DEPTH_EXCEEDED),
            (EmptyInputError, ErrorKind.EMPTY_INPUT),
            (SourceUnavailableError, ErrorKind.SOURCE_UNAVAILABLE),
            (FieldTooLongError, ErrorKind.FIELD_TOO_LONG),
        ],
    )
    def test_kind(self, error_class, kind):
        error = error_class("boom")

        assert isinstance(error, ContactParseError)
        assert error.kind is kind
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_position_and_detail(self):
        error = MalformedXMLError("bad", line=3, column=7, detail="MISMATCHED_TAG")

        assert (error.line, error.column, error.detail) == (3, 7, "MISMATCHED_TAG")

    def test_kind_values_are_stable_strings(self):
        assert {kind.value for kind in ErrorKind} == {
            "MALFORMED_XML",
            "INCOMPLETE_DOCUMENT",
            "DEPTH_EXCEEDED",
            "EMPTY_INPUT",
            "SOURCE_UNAVAILABLE",
            "FIELD_TOO_LONG",
        }


class TestDiagnosticEntry:
    """Test diagnostic entry validation."""

    def test_valid_entry(self):
        entry = DiagnosticEntry(DiagnosticSeverity.INFO, "skipped", "builder")

        data = entry.to_dict()
        assert data["severity"] == "INFO"
        assert data["component"] == "builder"

    def test_empty_message_rejected(self):
        with pytest.raises(ValueError):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "builder")

    def test_empty_component_rejected(self):
        with pytest.raises(ValueError):
            DiagnosticEntry(DiagnosticSeverity.INFO, "msg", "")


class TestPerformanceMetrics:
    """Test performance metric calculations."""

    def test_events_per_second(self):
        metrics = PerformanceMetrics(processing_time_ms=500.0, events_processed=100)
        assert metrics.events_per_second == 200.0

    def test_zero_time(self):
        assert PerformanceMetrics().events_per_second == 0.0

    def test_to_dict(self):
        data = PerformanceMetrics(contacts_built=3, max_depth_seen=2).to_dict()
        assert data["contacts_built"] == 3
        assert data["max_depth_seen"] == 2
