"""Contact XML Parser.

A streaming, depth-bounded parser that turns contact XML documents into an
immutable tree of contacts, rejecting malformed, truncated and hostile input
with a single typed error.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Configured parser - ContactXMLParser class with ParserConfig
- Level 3: Streaming - XMLEventSource and ContactTreeBuilder.iter_root_contacts()
"""

__version__ = "0.1.0"
__author__ = "Contact XML Parser Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import (
    ContactXMLParser,
    ParseFailure,
    ParseResult,
    parse,
    parse_file,
    parse_request,
    parse_stream,
    parse_string,
    parse_upload,
)

# Progressive API disclosure - Level 3: Event streaming
from .events import EventType, ParseEvent, XMLEventSource

# Configuration and error taxonomy
from .shared import ContactParseError, ErrorKind, ParserConfig

# Core result objects for all API levels
from .tree import Contact, ContactTreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "parse_upload",
    "parse_stream",
    "parse_request",

    # Level 2: Advanced parser class
    "ContactXMLParser",
    "ParserConfig",

    # Level 3: Streaming building blocks
    "XMLEventSource",
    "ParseEvent",
    "EventType",
    "ContactTreeBuilder",

    # Result objects and data structures
    "Contact",
    "ParseResult",
    "ParseFailure",
    "ErrorKind",
    "ContactParseError",
]
