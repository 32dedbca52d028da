"""Ingestion sources for contact XML parsing.

Each source turns one way of supplying XML (server-side path, uploaded
payload, inline text, or an already-open stream) into a readable stream, or
fails with the same error taxonomy the parser uses. The parser never branches
on which kind of source it was given.
"""

import io
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum, auto
from pathlib import Path
from typing import IO, Any, BinaryIO, Iterator, Optional, Union

from contact_xml_parser.shared import EmptyInputError, SourceUnavailableError

EMPTY_CONTENT_MESSAGE = (
    "Invalid XML: The XML content is empty or null. Please provide valid XML content."
)
MISSING_INPUT_MESSAGE = "Either file path or XML content is required"


class SourceType(Enum):
    """Ways XML can be supplied to the parser."""

    PATH = auto()      # File on the server's filesystem
    UPLOAD = auto()    # Payload uploaded by the client
    INLINE = auto()    # XML text pasted by the client
    STREAM = auto()    # Caller-owned open stream


class ContactSource(ABC):
    """Abstract base class for every ingestion source."""

    source_type: SourceType

    @abstractmethod
    def open(self) -> Any:
        """Return a context manager yielding a readable text or binary stream.

        Raises:
            SourceUnavailableError: If the input cannot be read
            EmptyInputError: If no content was supplied at all
        """

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable description used in logs and results."""

    @property
    def file_name(self) -> Optional[str]:
        return None


class PathSource(ContactSource):
    """XML file resolved from a server-side path."""

    source_type = SourceType.PATH

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._raw_path = str(path)

    def describe(self) -> str:
        return f"path:{self.path}"

    @property
    def file_name(self) -> Optional[str]:
        return self.path.name

    def check(self) -> None:
        """Validate the path before opening it."""
        if not self._raw_path.strip():
            raise EmptyInputError("File path is required")
        if not self.path.exists():
            raise SourceUnavailableError(f"File not found: {self.path}")
        if not self.path.is_file():
            raise SourceUnavailableError(f"Path is not a file: {self.path}")
        if not os.access(self.path, os.R_OK):
            raise SourceUnavailableError(f"Cannot read file: {self.path}")

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        self.check()
        try:
            handle = self.path.open("rb")
        except OSError as e:
            raise SourceUnavailableError(
                f"Error reading XML file: {e}. Please check that the file is accessible."
            ) from e
        with handle:
            yield handle


class UploadSource(ContactSource):
    """XML payload uploaded by a client, as bytes or a binary stream."""

    source_type = SourceType.UPLOAD

    def __init__(
        self,
        data: Union[bytes, bytearray, BinaryIO],
        file_name: Optional[str] = None,
    ) -> None:
        self.data = data
        self._file_name = file_name

    def describe(self) -> str:
        return f"upload:{self._file_name or '<unnamed>'}"

    @property
    def file_name(self) -> Optional[str]:
        return self._file_name

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        if isinstance(self.data, (bytes, bytearray)):
            if not self.data:
                raise SourceUnavailableError("File is empty")
            yield io.BytesIO(bytes(self.data))
            return

        if self._is_empty_stream(self.data):
            raise SourceUnavailableError("File is empty")
        yield self.data

    @staticmethod
    def _is_empty_stream(stream: BinaryIO) -> bool:
        """Check for a zero-length payload without consuming it."""
        try:
            if not stream.seekable():
                return False
            position = stream.tell()
            end = stream.seek(0, io.SEEK_END)
            stream.seek(position)
        except OSError as e:
            raise SourceUnavailableError(f"Error reading uploaded file: {e}") from e
        return end == position


class InlineSource(ContactSource):
    """XML text supplied directly by the caller."""

    source_type = SourceType.INLINE

    def __init__(self, text: Optional[Union[str, bytes]]) -> None:
        self.text = text

    def describe(self) -> str:
        length = len(self.text) if self.text is not None else 0
        return f"inline:{length} chars"

    @contextmanager
    def open(self) -> Iterator[IO[Any]]:
        if self.text is None or not self.text.strip():
            raise EmptyInputError(EMPTY_CONTENT_MESSAGE)
        if isinstance(self.text, bytes):
            yield io.BytesIO(self.text)
        else:
            yield io.StringIO(self.text)


class StreamSource(ContactSource):
    """Already-open stream owned by the caller; it is not closed here."""

    source_type = SourceType.STREAM

    def __init__(self, stream: IO[Any], description: str = "stream") -> None:
        if stream is None:
            raise EmptyInputError(
                "Invalid input: stream cannot be None. Please provide a valid "
                "file or XML content."
            )
        self.stream = stream
        self.description = description

    def describe(self) -> str:
        return self.description

    @property
    def file_name(self) -> Optional[str]:
        name = getattr(self.stream, "name", None)
        return Path(name).name if isinstance(name, str) else None

    @contextmanager
    def open(self) -> Iterator[IO[Any]]:
        yield self.stream


def resolve_source(
    file_path: Optional[str] = None,
    xml_content: Optional[str] = None,
) -> ContactSource:
    """Pick the source for a ``{filePath, xmlContent}`` request.

    Inline content wins over a path when both are given.

    Raises:
        EmptyInputError: If neither a path nor content was supplied
    """
    if xml_content is not None and xml_content.strip():
        return InlineSource(xml_content)
    if file_path is not None and file_path.strip():
        return PathSource(file_path)
    raise EmptyInputError(MISSING_INPUT_MESSAGE)
