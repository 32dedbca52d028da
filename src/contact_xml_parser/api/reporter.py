"""Result reporting for contact parses.

Turns the terminal state of a parse into a :class:`ParseResult` and renders
results into the response contract consumed by the contact front ends:

- success: ``{"success": true, "contacts": [...], "count": N}``
- failure: ``{"success": false, "error": "...", "errorType": "KIND"}``

Responses for deep trees nest far past the interpreter recursion limit, so
:func:`dumps_response` serializes them with an explicit stack.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from contact_xml_parser.shared import (
    ContactParseError,
    DiagnosticEntry,
    PerformanceMetrics,
)
from contact_xml_parser.tree import Contact

from .result import ParseFailure, ParseResult


def report_success(
    contacts: Sequence[Contact],
    source: Optional[str] = None,
    file_name: Optional[str] = None,
    correlation_id: Optional[str] = None,
    diagnostics: Optional[List[DiagnosticEntry]] = None,
    performance: Optional[PerformanceMetrics] = None,
) -> ParseResult:
    """Create the success variant for a fully built contact tree."""
    return ParseResult(
        success=True,
        contacts=tuple(contacts),
        source=source,
        file_name=file_name,
        correlation_id=correlation_id,
        diagnostics=list(diagnostics or []),
        performance=performance or PerformanceMetrics(),
    )


def report_failure(
    error: ContactParseError,
    source: Optional[str] = None,
    file_name: Optional[str] = None,
    correlation_id: Optional[str] = None,
    diagnostics: Optional[List[DiagnosticEntry]] = None,
    performance: Optional[PerformanceMetrics] = None,
) -> ParseResult:
    """Create the failure variant; any partially built contacts are discarded."""
    return ParseResult(
        success=False,
        failure=ParseFailure.from_error(error),
        source=source,
        file_name=file_name,
        correlation_id=correlation_id,
        diagnostics=list(diagnostics or []),
        performance=performance or PerformanceMetrics(),
    )


def render_response(result: ParseResult) -> Dict[str, Any]:
    """Render a result as the JSON-ready response dictionary.

    ``contacts`` and ``count`` are present only on success, ``error`` only on
    failure. ``errorType``, ``lineNumber``, ``columnNumber`` and ``fileName``
    are additive fields the front ends ignore.
    """
    failure = result.failure
    if failure is None:
        response: Dict[str, Any] = {
            "success": True,
            "contacts": [contact.to_dict() for contact in result.contacts],
            "count": result.count,
        }
        if result.file_name:
            response["fileName"] = result.file_name
        return response

    response = {
        "success": False,
        "error": failure.message,
        "errorType": failure.kind.value,
    }
    if failure.line is not None:
        response["lineNumber"] = failure.line
    if failure.column is not None:
        response["columnNumber"] = failure.column
    return response


def dumps_response(data: Any, indent: Optional[int] = None) -> str:
    """Serialize a rendered response to JSON without recursing into it.

    The output matches :func:`json.dumps` with the same ``indent``. Only
    dictionaries with string keys, lists, tuples and JSON scalars are
    accepted.

    Args:
        data: Response dictionary or list of them
        indent: Spaces per nesting level, or None for single-line output

    Raises:
        TypeError: If a value or key cannot be serialized

    Examples:
        >>> dumps_response({"success": True, "contacts": [], "count": 0})
        '{"success": true, "contacts": [], "count": 0}'
    """
    item_separator = ", " if indent is None else ","
    parts: List[str] = []
    # (is_raw_text, value, nesting level)
    stack: List[Tuple[bool, Any, int]] = [(False, data, 0)]
    while stack:
        raw, value, level = stack.pop()
        if raw:
            parts.append(value)
            continue

        if isinstance(value, dict):
            if not value:
                parts.append("{}")
                continue
            brackets = ("{", "}")
            entries = [(_encode_key(key) + ": ", item) for key, item in value.items()]
        elif isinstance(value, (list, tuple)):
            if not value:
                parts.append("[]")
                continue
            brackets = ("[", "]")
            entries = [("", item) for item in value]
        else:
            parts.append(json.dumps(value))
            continue

        inner = _line_break(indent, level + 1)
        parts.append(brackets[0] + inner)
        stack.append((True, _line_break(indent, level) + brackets[1], level))
        for position in range(len(entries) - 1, -1, -1):
            prefix, item = entries[position]
            stack.append((False, item, level + 1))
            if prefix:
                stack.append((True, prefix, level))
            if position:
                stack.append((True, item_separator + inner, level))
    return "".join(parts)


def _encode_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"Response keys must be str, not {type(key).__name__}")
    return json.dumps(key)


def _line_break(indent: Optional[int], level: int) -> str:
    if indent is None:
        return ""
    return "\n" + " " * (indent * level)
