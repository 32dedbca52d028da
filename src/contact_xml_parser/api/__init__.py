"""Public API for contact XML parsing.

This module provides the progressive-disclosure entry points, the ingestion
sources and the result objects returned by every parse.

Key Components:
    parse, parse_string, parse_file: One-call parsing functions
    ContactXMLParser: Reusable, configurable parser with statistics
    ContactSource: Base class for path, upload, inline and stream inputs
    ParseResult: Success-or-failure outcome of one parse
"""

from .parser import (
    ContactXMLParser,
    InputType,
    parse,
    parse_file,
    parse_request,
    parse_stream,
    parse_string,
    parse_upload,
)
from .reporter import dumps_response, render_response, report_failure, report_success
from .result import ParseFailure, ParseResult
from .sources import (
    ContactSource,
    InlineSource,
    PathSource,
    SourceType,
    StreamSource,
    UploadSource,
    resolve_source,
)

__all__ = [
    "ContactXMLParser",
    "InputType",
    "parse",
    "parse_file",
    "parse_request",
    "parse_stream",
    "parse_string",
    "parse_upload",
    "dumps_response",
    "render_response",
    "report_failure",
    "report_success",
    "ParseFailure",
    "ParseResult",
    "ContactSource",
    "InlineSource",
    "PathSource",
    "SourceType",
    "StreamSource",
    "UploadSource",
    "resolve_source",
]
