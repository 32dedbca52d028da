"""Pull-based XML event source.

This module wraps a text or binary stream and turns it into a lazy, finite,
non-restartable sequence of parse events. The stream is read in chunks and
fed to an incremental SAX reader hardened against entity expansion and
external references, so the whole document is never held in memory.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import IO, Any, Deque, Dict, Iterator, Optional
from xml.sax import SAXParseException
from xml.sax.expatreader import ExpatLocator
from xml.sax.handler import ContentHandler

from defusedxml import DefusedXmlException
from defusedxml.expatreader import DefusedExpatParser

from contact_xml_parser.shared import (
    ParserConfig,
    SourceUnavailableError,
    get_logger,
)

# Finer-grained codes for malformed input, keyed by substrings of the
# reader's error messages. First match wins.
MALFORMED_DETAIL_CODES = (
    ("mismatched tag", "MISMATCHED_TAG"),
    ("unclosed token", "UNCLOSED_TAG"),
    ("no element found", "MISSING_ROOT_ELEMENT"),
    ("junk after document element", "CONTENT_AFTER_ROOT"),
    ("duplicate attribute", "DUPLICATE_ATTRIBUTE"),
    ("invalid character number", "INVALID_CHARACTER"),
    ("declaration not at start", "MISPLACED_DECLARATION"),
    ("entity", "ENTITY_ERROR"),
    ("encoding", "ENCODING_ERROR"),
    ("partial character", "ENCODING_ERROR"),
    ("invalid token", "INVALID_TOKEN"),
)
FALLBACK_DETAIL_CODE = "XML_FORMAT_ERROR"
FORBIDDEN_DETAIL_CODE = "FORBIDDEN_CONSTRUCT"
# Codes the reader reports when input simply stops inside the document.
TRUNCATION_DETAIL_CODES = frozenset({"MISSING_ROOT_ELEMENT", "UNCLOSED_TAG"})

UTF8_BOM = b"\xef\xbb\xbf"
TEXT_BOM = "\ufeff"


class EventType(Enum):
    """Parse event types produced by the event source."""

    ELEMENT_OPEN = auto()      # Start tag with attributes
    TEXT = auto()              # Character data, possibly split across events
    ELEMENT_CLOSE = auto()     # End tag matching the innermost open element
    END_OF_DOCUMENT = auto()   # Stream exhausted, always the last event
    MALFORMED_INPUT = auto()   # Well-formedness violation, always the last event


@dataclass(frozen=True)
class EventPosition:
    """1-based position of an event in the input."""

    line: int
    column: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")


@dataclass(frozen=True)
class ParseEvent:
    """Single low-level parse event.

    Only the attributes relevant to the event type are populated: ``name``
    and ``attributes`` for element events, ``content`` for text, ``detail``
    and ``code`` for malformed input.
    """

    type: EventType
    name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    content: str = ""
    position: Optional[EventPosition] = None
    detail: Optional[str] = None
    code: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        """Check whether no further events can follow this one."""
        return self.type in (EventType.END_OF_DOCUMENT, EventType.MALFORMED_INPUT)

    @classmethod
    def element_open(
        cls,
        name: str,
        attributes: Optional[Dict[str, str]] = None,
        position: Optional[EventPosition] = None,
    ) -> "ParseEvent":
        return cls(EventType.ELEMENT_OPEN, name=name,
                   attributes=dict(attributes or {}), position=position)

    @classmethod
    def text(cls, content: str, position: Optional[EventPosition] = None) -> "ParseEvent":
        return cls(EventType.TEXT, content=content, position=position)

    @classmethod
    def element_close(
        cls, name: str, position: Optional[EventPosition] = None
    ) -> "ParseEvent":
        return cls(EventType.ELEMENT_CLOSE, name=name, position=position)

    @classmethod
    def end_of_document(cls) -> "ParseEvent":
        return cls(EventType.END_OF_DOCUMENT)

    @classmethod
    def malformed(
        cls,
        detail: str,
        position: Optional[EventPosition] = None,
        code: Optional[str] = None,
    ) -> "ParseEvent":
        return cls(
            EventType.MALFORMED_INPUT,
            detail=detail,
            position=position,
            code=code or classify_malformed(detail),
        )


def classify_malformed(message: str) -> str:
    """Map a reader error message onto a malformed-input detail code."""
    lowered = message.lower()
    for needle, code in MALFORMED_DETAIL_CODES:
        if needle in lowered:
            return code
    return FALLBACK_DETAIL_CODE


def strip_preamble(chunk: Any) -> Any:
    """Drop byte order marks and whitespace ahead of the first markup."""
    bom = UTF8_BOM if isinstance(chunk, bytes) else TEXT_BOM
    while True:
        stripped = chunk.lstrip()
        if stripped.startswith(bom):
            stripped = stripped[len(bom):]
        if stripped == chunk:
            return chunk
        chunk = stripped


def _is_partial_bom(chunk: Any) -> bool:
    """Check for the first bytes of a UTF-8 BOM split across reads."""
    return (
        isinstance(chunk, bytes)
        and len(chunk) < len(UTF8_BOM)
        and UTF8_BOM.startswith(chunk)
    )


def _make_position(line: Optional[int], column: Optional[int]) -> Optional[EventPosition]:
    """Build a 1-based position from the reader's 1-based line, 0-based column."""
    if line is None or column is None or line < 1 or column < 0:
        return None
    return EventPosition(line, column + 1)


class _EventCollector(ContentHandler):
    """SAX content handler that queues events for the pulling generator."""

    def __init__(self) -> None:
        super().__init__()
        self.pending: Deque[ParseEvent] = deque()
        self.open_elements = 0

    def current_position(self) -> Optional[EventPosition]:
        if self._locator is None:
            return None
        return _make_position(
            self._locator.getLineNumber(), self._locator.getColumnNumber()
        )

    def startElement(self, name: str, attrs: Any) -> None:
        self.open_elements += 1
        self.pending.append(
            ParseEvent.element_open(name, dict(attrs.items()), self.current_position())
        )

    def endElement(self, name: str) -> None:
        self.open_elements -= 1
        self.pending.append(ParseEvent.element_close(name, self.current_position()))

    def characters(self, content: str) -> None:
        self.pending.append(ParseEvent.text(content, self.current_position()))

    def drain(self) -> Iterator[ParseEvent]:
        while self.pending:
            yield self.pending.popleft()


class XMLEventSource:
    """Lazy event sequence over one XML stream.

    The source pulls ``config.buffer_size`` characters (or bytes) at a time
    from the stream and yields the events each chunk produces before reading
    the next one. A caller may stop iterating at any point; nothing but
    in-memory state is held.

    Examples:
        >>> import io
        >>> source = XMLEventSource(io.StringIO("<contacts/>"))
        >>> [event.type.name for event in source]
        ['ELEMENT_OPEN', 'ELEMENT_CLOSE', 'END_OF_DOCUMENT']
    """

    def __init__(
        self,
        stream: IO[Any],
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the event source.

        Args:
            stream: Readable text or binary stream
            config: Parser configuration (buffer size, DTD policy)
            correlation_id: Optional correlation ID for request tracking
        """
        self._stream = stream
        self.config = config or ParserConfig()
        self.logger = get_logger(__name__, correlation_id, "event_source")
        self.characters_fed = 0
        self._started = False

    def __iter__(self) -> Iterator[ParseEvent]:
        return self.events()

    def events(self) -> Iterator[ParseEvent]:
        """Yield parse events until the document ends or proves malformed.

        Raises:
            RuntimeError: If the source has already been iterated
            SourceUnavailableError: If reading the underlying stream fails
        """
        if self._started:
            raise RuntimeError("XMLEventSource can only be iterated once")
        self._started = True
        return self._generate()

    def _generate(self) -> Iterator[ParseEvent]:
        collector = _EventCollector()
        reader = DefusedExpatParser(forbid_dtd=self.config.forbid_dtd)
        reader.setContentHandler(collector)
        # feed() never installs a locator on its own.
        collector.setDocumentLocator(ExpatLocator(reader))

        seen_markup = False
        held = None
        for chunk in self._read_chunks():
            if not seen_markup:
                if held is not None:
                    chunk, held = held + chunk, None
                # Leading whitespace would push an XML declaration off the
                # start of the document.
                chunk = strip_preamble(chunk)
                if not chunk:
                    continue
                if _is_partial_bom(chunk):
                    held = chunk
                    continue
                seen_markup = True

            self.characters_fed += len(chunk)
            failure = self._feed(reader, collector, chunk)
            yield from collector.drain()
            if failure is not None:
                yield failure
                return

        if held is not None:
            # Input ended inside what looked like a byte order mark.
            seen_markup = True
            self.characters_fed += len(held)
            failure = self._feed(reader, collector, held)
            yield from collector.drain()
            if failure is not None:
                yield failure
                return

        if not seen_markup:
            self.logger.debug("Stream held no markup")
            yield ParseEvent.end_of_document()
            return

        # The reader may hold back a trailing partial token until the final
        # feed, so closing can still produce element events.
        failure = self._feed(reader, collector, None)
        yield from collector.drain()

        if (
            failure is not None
            and failure.code in TRUNCATION_DETAIL_CODES
            and collector.open_elements > 0
        ):
            # Truncated document; the builder reports which elements are open.
            self.logger.debug(
                "Stream ended with open elements",
                extra={"open_elements": collector.open_elements},
            )
            failure = None
        yield failure if failure is not None else ParseEvent.end_of_document()

    def _feed(
        self,
        reader: DefusedExpatParser,
        collector: _EventCollector,
        chunk: Any,
    ) -> Optional[ParseEvent]:
        """Feed one chunk (``None`` finishes the document).

        Returns:
            A MALFORMED_INPUT event when the reader rejects the input
        """
        try:
            if chunk is None:
                reader.close()
            else:
                reader.feed(chunk)
        except SAXParseException as e:
            return ParseEvent.malformed(
                e.getMessage(),
                _make_position(e.getLineNumber(), e.getColumnNumber()),
            )
        except DefusedXmlException as e:
            return ParseEvent.malformed(
                f"{type(e).__name__}: {e}",
                collector.current_position(),
                code=FORBIDDEN_DETAIL_CODE,
            )
        return None

    def _read_chunks(self) -> Iterator[Any]:
        read = self._stream.read
        buffer_size = self.config.buffer_size
        while True:
            try:
                chunk = read(buffer_size)
            except (OSError, UnicodeDecodeError) as e:
                raise SourceUnavailableError(f"Error reading XML input: {e}") from e
            if not chunk:
                return
            yield chunk


def iter_events(
    stream: IO[Any],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> Iterator[ParseEvent]:
    """Convenience wrapper returning the event iterator for ``stream``."""
    return XMLEventSource(stream, config, correlation_id).events()
