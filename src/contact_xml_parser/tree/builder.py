"""Core contact tree building implementation.

This module implements the state machine that consumes parse events one at a
time and reconstructs the contact hierarchy on an explicit stack of frames.
Nesting depth is bounded by configuration, never by the Python call stack.
"""

from enum import Enum, auto
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from contact_xml_parser.events import EventPosition, EventType, ParseEvent
from contact_xml_parser.shared import (
    DepthExceededError,
    DiagnosticEntry,
    DiagnosticSeverity,
    EmptyInputError,
    FieldTooLongError,
    IncompleteDocumentError,
    MalformedXMLError,
    ParserConfig,
    get_logger,
)

from .assembly import ContactFrame, ContactTreeAssembler
from .contact import Contact

EMPTY_INPUT_MESSAGE = (
    "Invalid XML: The XML content is empty. Please provide valid XML content."
)


class ElementRole(Enum):
    """Role an open element plays in the contact vocabulary."""

    RECORD = auto()    # Opens a new contact
    GROUP = auto()     # Structural wrapper around records
    FIELD = auto()     # Leaf whose text becomes a contact field
    UNKNOWN = auto()   # Outside the vocabulary; content is skipped


def _describe_position(position: Optional[EventPosition]) -> str:
    if position is None:
        return ""
    return f" (Line {position.line}, Column {position.column})"


def _position_args(position: Optional[EventPosition]) -> Tuple[Optional[int], Optional[int]]:
    if position is None:
        return None, None
    return position.line, position.column


class ContactTreeBuilder:
    """Builds the contact tree from a parse event sequence.

    A builder holds the state of exactly one parse and must not be reused.
    Any failure raises a :class:`~contact_xml_parser.shared.ContactParseError`
    subclass and leaves no partial result behind.

    Examples:
        >>> import io
        >>> from contact_xml_parser.events import XMLEventSource
        >>> xml = "<contacts><contact id='1'><name>Ann</name></contact></contacts>"
        >>> contacts = ContactTreeBuilder().build(XMLEventSource(io.StringIO(xml)))
        >>> contacts[0].name
        'Ann'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Parser configuration (vocabulary and limits)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "contact_tree_builder")

        self.assembler = ContactTreeAssembler()
        self.diagnostics: List[DiagnosticEntry] = []
        self.events_processed = 0

        self._frames: List[ContactFrame] = []
        self._elements: List[Tuple[str, ElementRole]] = []
        self._field_target: Optional[str] = None
        self._field_element: Optional[str] = None
        self._field_buffer: List[str] = []
        self._field_length = 0
        self._saw_element = False
        self._finished = False
        self._skipped_elements: Set[str] = set()

    @property
    def depth(self) -> int:
        """Current number of open contact frames."""
        return len(self._frames)

    @property
    def finished(self) -> bool:
        return self._finished

    def build(self, events: Iterable[ParseEvent]) -> Tuple[Contact, ...]:
        """Consume a complete event sequence.

        Args:
            events: Parse events, normally an ``XMLEventSource``

        Returns:
            Root-level contacts in document order
        """
        for _ in self.iter_root_contacts(events):
            pass
        return self.assembler.root_contacts

    def iter_root_contacts(self, events: Iterable[ParseEvent]) -> Iterator[Contact]:
        """Yield each root-level contact as soon as its closing element is seen.

        Errors discovered later in the stream still raise, so consumers that
        need all-or-nothing semantics should use :meth:`build` instead.
        """
        self.logger.debug(
            "Starting contact tree building",
            extra={"max_depth": self.config.max_depth},
        )
        for event in events:
            emitted = self.assembler.count
            self.feed(event)
            if self.assembler.count > emitted:
                yield self.assembler.last_root
            if self._finished:
                break

        if not self._finished:
            raise IncompleteDocumentError(
                "Incomplete XML document: the event stream stopped before the end "
                "of the document"
            )

        self.logger.debug(
            "Contact tree building completed",
            extra={
                "root_count": self.assembler.count,
                "contacts_built": self.assembler.contacts_built,
                "events_processed": self.events_processed,
            },
        )

    def feed(self, event: ParseEvent) -> None:
        """Apply one event to the builder state."""
        if self._finished:
            raise RuntimeError("ContactTreeBuilder has already finished")
        self.events_processed += 1

        if event.type == EventType.ELEMENT_OPEN:
            self._handle_open(event)
        elif event.type == EventType.TEXT:
            self._handle_text(event)
        elif event.type == EventType.ELEMENT_CLOSE:
            self._handle_close(event)
        elif event.type == EventType.END_OF_DOCUMENT:
            self._handle_end_of_document()
        elif event.type == EventType.MALFORMED_INPUT:
            self._handle_malformed(event)

    def _classify(self, name: str) -> ElementRole:
        if name == self.config.record_element:
            return ElementRole.RECORD
        if name == self.config.group_element:
            return ElementRole.GROUP
        if (
            name in self.config.field_elements
            and self._field_target is None
            and self._elements
            and self._elements[-1][1] is ElementRole.RECORD
        ):
            return ElementRole.FIELD
        return ElementRole.UNKNOWN

    def _handle_open(self, event: ParseEvent) -> None:
        name = event.name or ""
        role = self._classify(name)
        self._saw_element = True

        if role is ElementRole.RECORD:
            self._push_frame(event)
        elif role is ElementRole.FIELD:
            self._field_target = self.config.field_elements[name]
            self._field_element = name
            self._field_buffer = []
            self._field_length = 0
        elif role is ElementRole.UNKNOWN:
            self._note_skipped(name, event.position)

        self._elements.append((name, role))

    def _push_frame(self, event: ParseEvent) -> None:
        if len(self._frames) >= self.config.max_depth:
            line, column = _position_args(event.position)
            raise DepthExceededError(
                f"Contact nesting exceeds the maximum depth of "
                f"{self.config.max_depth}{_describe_position(event.position)}",
                line=line,
                column=column,
            )

        frame = ContactFrame(element=event.name or "", depth=len(self._frames) + 1)
        id_attribute = self.config.id_attribute
        if id_attribute and id_attribute in event.attributes:
            frame.id = event.attributes[id_attribute]

        self._frames.append(frame)
        self.assembler.note_depth(frame.depth)

    def _handle_text(self, event: ParseEvent) -> None:
        if not self._elements or self._elements[-1][1] is not ElementRole.FIELD:
            return

        self._field_length += len(event.content)
        if self._field_length > self.config.max_field_length:
            line, column = _position_args(event.position)
            raise FieldTooLongError(
                f"Field <{self._field_element}> exceeds the maximum length of "
                f"{self.config.max_field_length} characters"
                f"{_describe_position(event.position)}",
                line=line,
                column=column,
            )
        self._field_buffer.append(event.content)

    def _handle_close(self, event: ParseEvent) -> None:
        _, role = self._elements.pop()

        if role is ElementRole.FIELD:
            self._commit_field()
        elif role is ElementRole.RECORD:
            frame = self._frames.pop()
            parent = self._frames[-1] if self._frames else None
            self.assembler.finalize(frame, parent)

    def _commit_field(self) -> None:
        value = "".join(self._field_buffer)
        if self.config.strip_whitespace:
            value = value.strip()
        # A FIELD role is only assigned directly inside a RECORD, so a frame exists.
        self._frames[-1].set_field(self._field_target or "", value)

        self._field_target = None
        self._field_element = None
        self._field_buffer = []
        self._field_length = 0

    def _handle_end_of_document(self) -> None:
        if self._elements:
            innermost = self._elements[-1][0]
            raise IncompleteDocumentError(
                f"Incomplete XML document: reached end of input with "
                f"{len(self._elements)} unclosed element(s), innermost <{innermost}>"
            )
        if not self._saw_element:
            raise EmptyInputError(EMPTY_INPUT_MESSAGE)
        self._finished = True

    def _handle_malformed(self, event: ParseEvent) -> None:
        line, column = _position_args(event.position)
        detail = event.detail or "The XML document contains formatting errors."
        raise MalformedXMLError(
            f"XML Format Error: {detail}{_describe_position(event.position)}",
            line=line,
            column=column,
            detail=event.code,
        )

    def _note_skipped(self, name: str, position: Optional[EventPosition]) -> None:
        if name in self._skipped_elements:
            return
        self._skipped_elements.add(name)
        self.diagnostics.append(
            DiagnosticEntry(
                severity=DiagnosticSeverity.INFO,
                message=f"Skipped unrecognized element <{name}>",
                component="contact_tree_builder",
                position=(
                    {"line": position.line, "column": position.column}
                    if position else None
                ),
                correlation_id=self.correlation_id,
            )
        )
