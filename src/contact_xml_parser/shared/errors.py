"""Error taxonomy for contact XML parsing.

Every failure a parse can end in is one of the :class:`ErrorKind` members.
Components raise the matching :class:`ContactParseError` subclass; the parser
API is the only place that turns these exceptions into failure results.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of fatal parse failures."""

    MALFORMED_XML = "MALFORMED_XML"              # Stream is not well-formed XML
    INCOMPLETE_DOCUMENT = "INCOMPLETE_DOCUMENT"  # Stream ended with open elements
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"            # Contact nesting above max_depth
    EMPTY_INPUT = "EMPTY_INPUT"                  # Nothing but whitespace supplied
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"    # Path/upload could not be read
    FIELD_TOO_LONG = "FIELD_TOO_LONG"            # Leaf text above max_field_length


class ContactParseError(Exception):
    """Base exception for every fatal contact parsing failure.

    Attributes:
        kind: Failure kind reported to callers
        line: 1-based line of the offending input, when known
        column: 1-based column of the offending input, when known
        detail: Finer-grained code (malformed-input category), when known
    """

    kind: ErrorKind = ErrorKind.MALFORMED_XML

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        detail: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.detail = detail


class MalformedXMLError(ContactParseError):
    """Raised when the input violates XML well-formedness."""

    kind = ErrorKind.MALFORMED_XML


class IncompleteDocumentError(ContactParseError):
    """Raised when the input ends before every open element is closed."""

    kind = ErrorKind.INCOMPLETE_DOCUMENT


class DepthExceededError(ContactParseError):
    """Raised when contacts nest deeper than the configured maximum."""

    kind = ErrorKind.DEPTH_EXCEEDED


class EmptyInputError(ContactParseError):
    """Raised when no XML content was supplied at all."""

    kind = ErrorKind.EMPTY_INPUT


class SourceUnavailableError(ContactParseError):
    """Raised by ingestion sources that cannot produce a stream."""

    kind = ErrorKind.SOURCE_UNAVAILABLE


class FieldTooLongError(ContactParseError):
    """Raised when a leaf field accumulates more text than allowed."""

    kind = ErrorKind.FIELD_TOO_LONG
