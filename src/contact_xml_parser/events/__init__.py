"""Event source for contact XML parsing.

This module turns a character or byte stream into a lazy sequence of
SAX-style parse events.

Key Components:
    XMLEventSource: Pull-based, non-restartable event sequence over one stream
    ParseEvent: Single event with type, element name, text and position
    EventType: Enumeration of event types
    EventPosition: 1-based line/column position
"""

from .source import (
    EventPosition,
    EventType,
    ParseEvent,
    XMLEventSource,
    classify_malformed,
    iter_events,
)

__all__ = [
    "EventPosition",
    "EventType",
    "ParseEvent",
    "XMLEventSource",
    "classify_malformed",
    "iter_events",
]
