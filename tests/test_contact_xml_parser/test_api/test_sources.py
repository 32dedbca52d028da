"""Tests for ingestion sources."""

import io
import os
import sys

import pytest

from contact_xml_parser.api.sources import (
    InlineSource,
    PathSource,
    SourceType,
    StreamSource,
    UploadSource,
    resolve_source,
)
from contact_xml_parser.shared import EmptyInputError, SourceUnavailableError


class TestPathSource:
    """Test server-side file sources."""

    def test_open_reads_bytes(self, tmp_path):
        path = tmp_path / "contacts.xml"
        path.write_bytes(b"<contacts/>")
        source = PathSource(path)

        with source.open() as stream:
            assert stream.read() == b"<contacts/>"
        assert stream.closed
        assert source.file_name == "contacts.xml"
        assert source.source_type is SourceType.PATH

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError) as exc_info:
            with PathSource(tmp_path / "missing.xml").open():
                pass
        assert exc_info.value.message.startswith("File not found:")

    def test_directory(self, tmp_path):
        with pytest.raises(SourceUnavailableError) as exc_info:
            PathSource(tmp_path).check()
        assert exc_info.value.message.startswith("Path is not a file:")

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="file permissions are not enforced",
    )
    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "locked.xml"
        path.write_text("<contacts/>")
        path.chmod(0)
        try:
            with pytest.raises(SourceUnavailableError) as exc_info:
                PathSource(path).check()
            assert exc_info.value.message.startswith("Cannot read file:")
        finally:
            path.chmod(0o644)

    def test_blank_path(self):
        with pytest.raises(EmptyInputError):
            PathSource("  ").check()


class TestUploadSource:
    """Test uploaded payload sources."""

    def test_bytes_payload(self):
        source = UploadSource(b"<contacts/>", file_name="upload.xml")

        with source.open() as stream:
            assert stream.read() == b"<contacts/>"
        assert source.file_name == "upload.xml"
        assert source.describe() == "upload:upload.xml"

    def test_empty_bytes(self):
        with pytest.raises(SourceUnavailableError) as exc_info:
            with UploadSource(b"").open():
                pass
        assert exc_info.value.message == "File is empty"

    def test_empty_stream(self):
        with pytest.raises(SourceUnavailableError):
            with UploadSource(io.BytesIO()).open():
                pass

    def test_stream_payload(self):
        payload = io.BytesIO(b"<contacts/>")

        with UploadSource(payload).open() as stream:
            assert stream.read() == b"<contacts/>"


class TestInlineSource:
    """Test inline XML text sources."""

    def test_text(self):
        with InlineSource("<contacts/>").open() as stream:
            assert stream.read() == "<contacts/>"

    def test_bytes(self):
        with InlineSource(b"<contacts/>").open() as stream:
            assert stream.read() == b"<contacts/>"

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_blank(self, text):
        with pytest.raises(EmptyInputError):
            with InlineSource(text).open():
                pass


class TestStreamSource:
    """Test caller-owned streams."""

    def test_stream_not_closed(self):
        stream = io.StringIO("<contacts/>")

        with StreamSource(stream).open() as opened:
            assert opened is stream
        assert not stream.closed

    def test_none_rejected(self):
        with pytest.raises(EmptyInputError):
            StreamSource(None)  # type: ignore[arg-type]

    def test_file_name_from_stream(self, tmp_path):
        path = tmp_path / "named.xml"
        path.write_text("<contacts/>")
        with path.open("rb") as handle:
            assert StreamSource(handle).file_name == "named.xml"


class TestResolveSource:
    """Test request precedence between inline content and paths."""

    def test_inline_wins(self):
        source = resolve_source(file_path="/tmp/x.xml", xml_content="<contacts/>")
        assert isinstance(source, InlineSource)

    def test_blank_inline_falls_back_to_path(self):
        source = resolve_source(file_path="/tmp/x.xml", xml_content="   ")
        assert isinstance(source, PathSource)

    def test_neither(self):
        with pytest.raises(EmptyInputError) as exc_info:
            resolve_source()
        assert exc_info.value.message == "Either file path or XML content is required"
