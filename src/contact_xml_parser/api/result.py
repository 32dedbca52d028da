"""Parse result objects returned by the contact parser API."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from contact_xml_parser.shared import (
    ContactParseError,
    DiagnosticEntry,
    ErrorKind,
    PerformanceMetrics,
)
from contact_xml_parser.tree import Contact


@dataclass(frozen=True)
class ParseFailure:
    """Description of the single error that ended a failed parse."""

    kind: ErrorKind
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    detail: Optional[str] = None

    @classmethod
    def from_error(cls, error: ContactParseError) -> "ParseFailure":
        return cls(
            kind=error.kind,
            message=error.message,
            line=error.line,
            column=error.column,
            detail=error.detail,
        )


@dataclass
class ParseResult:
    """Outcome of one contact parse: either contacts or exactly one failure.

    On success ``contacts`` holds the root-level contacts in document order
    and ``count`` is their number (nested sub-contacts are not counted). On
    failure ``contacts`` is always empty.
    """

    success: bool
    contacts: Tuple[Contact, ...] = ()
    failure: Optional[ParseFailure] = None

    # Source information
    source: Optional[str] = None
    file_name: Optional[str] = None
    correlation_id: Optional[str] = None

    # Metadata and diagnostics
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    def __post_init__(self) -> None:
        """Enforce the success/failure exclusivity."""
        if self.success and self.failure is not None:
            raise ValueError("A successful result cannot carry a failure")
        if not self.success and self.failure is None:
            raise ValueError("A failed result must carry a failure")
        if not self.success and self.contacts:
            raise ValueError("A failed result cannot carry contacts")
        if not isinstance(self.contacts, tuple):
            self.contacts = tuple(self.contacts)

    @property
    def count(self) -> int:
        """Number of root-level contacts."""
        return len(self.contacts)

    @property
    def error(self) -> Optional[str]:
        return self.failure.message if self.failure else None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.failure.kind if self.failure else None

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def iter_contacts(self) -> Iterator[Contact]:
        """Yield every contact, nested ones included, in document order."""
        for contact in self.contacts:
            yield from contact.iter_tree()

    def to_response(self) -> Dict[str, Any]:
        """Render the ``{success, contacts, count}`` / ``{success, error}`` contract."""
        from .reporter import render_response

        return render_response(self)

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize :meth:`to_response` as JSON, at any nesting depth."""
        from .reporter import dumps_response

        return dumps_response(self.to_response(), indent=indent)
