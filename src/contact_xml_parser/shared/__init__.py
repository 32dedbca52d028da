"""Shared utilities for contact XML parsing.

This module provides shared data structures, configuration objects, the error
taxonomy, and logging utilities used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .errors import (
    ContactParseError,
    DepthExceededError,
    EmptyInputError,
    ErrorKind,
    FieldTooLongError,
    IncompleteDocumentError,
    MalformedXMLError,
    SourceUnavailableError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "ContactParseError",
    "DepthExceededError",
    "EmptyInputError",
    "ErrorKind",
    "FieldTooLongError",
    "IncompleteDocumentError",
    "MalformedXMLError",
    "SourceUnavailableError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
