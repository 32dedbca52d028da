"""Core parser API with progressive disclosure for contact XML parsing.

This module provides the main parsing API, from simple module-level functions
to a reusable, configurable parser class. Every entry point returns a
:class:`ParseResult`; parse failures of any documented kind are reported in
the result, never raised.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, TextIO, Union

from contact_xml_parser.events import XMLEventSource
from contact_xml_parser.shared import (
    ContactParseError,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from contact_xml_parser.tree import ContactTreeBuilder

from .reporter import report_failure, report_success
from .result import ParseResult
from .sources import (
    ContactSource,
    InlineSource,
    PathSource,
    StreamSource,
    UploadSource,
    resolve_source,
)

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path, ContactSource]

MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse contacts from various input sources with automatic type detection.

    Strings and bytes are treated as inline XML, :class:`~pathlib.Path`
    objects as server-side files and objects with ``read`` as open streams.

    Args:
        input_data: XML content, a path, a readable stream or a ContactSource
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult with the contact tree or a single failure

    Raises:
        TypeError: If the input type cannot be parsed

    Examples:
        >>> result = parse('<contacts><contact><name>Ann</name></contact></contacts>')
        >>> result.success, result.count
        (True, 1)
        >>> result.contacts[0].name
        'Ann'
    """
    return ContactXMLParser(config, correlation_id).parse(input_data)


def parse_string(
    xml_string: Union[str, bytes],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse contacts from inline XML text.

    Examples:
        >>> parse_string('<contacts><contact>').error_kind.name
        'INCOMPLETE_DOCUMENT'
    """
    return ContactXMLParser(config, correlation_id).parse_source(InlineSource(xml_string))


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse contacts from a file on the local filesystem.

    Examples:
        >>> result = parse_file('missing.xml')
        >>> result.success, result.error_kind.name
        (False, 'SOURCE_UNAVAILABLE')
    """
    return ContactXMLParser(config, correlation_id).parse_source(PathSource(file_path))


def parse_upload(
    data: Union[bytes, BinaryIO],
    file_name: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse contacts from an uploaded payload; ``file_name`` is echoed back."""
    return ContactXMLParser(config, correlation_id).parse_source(
        UploadSource(data, file_name)
    )


def parse_stream(
    stream: Union[BinaryIO, TextIO],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse contacts from a caller-owned open stream. The stream is not closed."""
    return ContactXMLParser(config, correlation_id).parse_source(StreamSource(stream))


def parse_request(
    file_path: Optional[str] = None,
    xml_content: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse a ``{filePath, xmlContent}`` request; inline content wins."""
    return ContactXMLParser(config, correlation_id).parse_request(file_path, xml_content)


class ContactXMLParser:
    """Reusable contact parser with configuration and usage statistics.

    Each call to :meth:`parse` builds fresh per-parse state, so one instance
    may be shared across sequential requests. Parses are independent and
    identical input always yields an identical result.

    Attributes:
        config: Current parser configuration
        correlation_id: Default correlation ID for request tracking

    Examples:
        >>> parser = ContactXMLParser(ParserConfig.hardened())
        >>> parser.parse('<contacts/>').count
        0
        >>> parser.statistics["total_parses"]
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "contact_xml_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
        self._failures_by_kind: Dict[str, int] = {}

    def parse(
        self,
        input_data: InputType,
        correlation_id: Optional[str] = None,
    ) -> ParseResult:
        """Parse contacts from any supported input type.

        Raises:
            TypeError: If the input type cannot be parsed
        """
        return self.parse_source(self._detect_source(input_data), correlation_id)

    def parse_request(
        self,
        file_path: Optional[str] = None,
        xml_content: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> ParseResult:
        """Parse a ``{filePath, xmlContent}`` request body."""
        start_time = time.time()
        try:
            source = resolve_source(file_path, xml_content)
        except ContactParseError as e:
            return self._fail(e, None, None, [], PerformanceMetrics(), start_time,
                              correlation_id or self.correlation_id)
        return self.parse_source(source, correlation_id)

    def parse_source(
        self,
        source: ContactSource,
        correlation_id: Optional[str] = None,
    ) -> ParseResult:
        """Run one complete parse over ``source``.

        Args:
            source: Ingestion source to read from
            correlation_id: Optional correlation ID override for this parse

        Returns:
            ParseResult with root contacts in document order, or one failure
        """
        start_time = time.time()
        effective_id = correlation_id or self.correlation_id
        description = source.describe()
        logger = self.logger.bind(effective_id) if correlation_id else self.logger

        logger.info(
            "Starting contact parse",
            extra={
                "source": description,
                "source_type": source.source_type.name,
                "parse_count": self._parse_count + 1,
            },
        )

        builder = ContactTreeBuilder(self.config, effective_id)
        performance = PerformanceMetrics()
        event_source: Optional[XMLEventSource] = None
        try:
            with source.open() as stream:
                event_source = XMLEventSource(stream, self.config, effective_id)
                contacts = builder.build(event_source)
        except ContactParseError as e:
            self._collect_metrics(performance, builder, event_source, start_time)
            return self._fail(
                e, description, source.file_name, builder.diagnostics,
                performance, start_time, effective_id,
            )

        self._collect_metrics(performance, builder, event_source, start_time)
        self._record(performance.processing_time_ms, success=True)

        logger.info(
            "Contact parse completed",
            extra={
                "source": description,
                "root_count": len(contacts),
                "contacts_built": performance.contacts_built,
                "max_depth_seen": performance.max_depth_seen,
                "processing_time_ms": performance.processing_time_ms,
            },
        )

        return report_success(
            contacts,
            source=description,
            file_name=source.file_name,
            correlation_id=effective_id,
            diagnostics=builder.diagnostics,
            performance=performance,
        )

    def _detect_source(self, input_data: Any) -> ContactSource:
        if isinstance(input_data, ContactSource):
            return input_data
        if isinstance(input_data, Path):
            return PathSource(input_data)
        if isinstance(input_data, (str, bytes)):
            return InlineSource(input_data)
        if hasattr(input_data, "read"):
            return StreamSource(input_data)
        raise TypeError(
            f"Unsupported input type for contact parsing: {type(input_data).__name__}"
        )

    def _fail(
        self,
        error: ContactParseError,
        description: Optional[str],
        file_name: Optional[str],
        diagnostics: Any,
        performance: PerformanceMetrics,
        start_time: float,
        correlation_id: Optional[str],
    ) -> ParseResult:
        if not performance.processing_time_ms:
            performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self._record(performance.processing_time_ms, success=False,
                     kind=error.kind.value)

        logger = (
            self.logger if correlation_id == self.correlation_id
            else self.logger.bind(correlation_id)
        )
        logger.warning(
            "Contact parse failed",
            extra={
                "source": description,
                "error_kind": error.kind.value,
                "error_detail": error.detail,
                "line": error.line,
                "column": error.column,
                "processing_time_ms": performance.processing_time_ms,
            },
        )

        return report_failure(
            error,
            source=description,
            file_name=file_name,
            correlation_id=correlation_id,
            diagnostics=list(diagnostics),
            performance=performance,
        )

    @staticmethod
    def _collect_metrics(
        performance: PerformanceMetrics,
        builder: ContactTreeBuilder,
        event_source: Optional[XMLEventSource],
        start_time: float,
    ) -> None:
        performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        performance.events_processed = builder.events_processed
        performance.contacts_built = builder.assembler.contacts_built
        performance.max_depth_seen = builder.assembler.max_depth_seen
        if event_source is not None:
            performance.characters_processed = event_source.characters_fed

    def _record(self, processing_time: float, success: bool,
                kind: Optional[str] = None) -> None:
        self._parse_count += 1
        self._total_processing_time += processing_time
        if success:
            self._successful_parses += 1
        elif kind is not None:
            self._failures_by_kind[kind] = self._failures_by_kind.get(kind, 0) + 1

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the configuration used by subsequent parses."""
        self.config = config
        self.logger.info(
            "Parser reconfigured",
            extra={"config_name": config.name, "max_depth": config.max_depth},
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "failed_parses": self._parse_count - self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "failures_by_kind": dict(self._failures_by_kind),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
        self._failures_by_kind = {}

        self.logger.info("Parser statistics reset")
