"""Configuration for contact XML parsing.

This module provides the immutable configuration object shared by the event
source, the contact tree builder and the parser API, together with its
validation and serialization helpers.
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

DEFAULT_MAX_DEPTH = 1000
DEFAULT_MAX_FIELD_LENGTH = 64 * 1024  # characters per leaf field
DEFAULT_BUFFER_SIZE = 8192  # characters or bytes read per chunk

MIN_BUFFER_SIZE = 1
MAX_BUFFER_SIZE = 16 * 1024 * 1024  # 16MB

DEFAULT_FIELD_ELEMENTS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "lastName": "last_name",
}

CONTACT_FIELDS = ("id", "name", "last_name")

# Limits and policy applied by ParserConfig.harden()
HARDENED_MAX_DEPTH = 64
HARDENED_MAX_FIELD_LENGTH = 1024


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for a contact parse.

    Thread-safe due to frozen dataclass implementation; one instance can be
    shared by any number of concurrent parses. ``field_elements`` is stored
    as a read-only mapping and is left out of the hash.

    Attributes:
        max_depth: Maximum number of nested contact records
        max_field_length: Maximum characters accumulated for one leaf field
        buffer_size: Chunk size used when reading the input stream
        record_element: Element that opens a new contact
        group_element: Purely structural wrapper around contact elements
        field_elements: Leaf element name to contact field name mapping
        id_attribute: Attribute of the record element that populates ``id``
            (``None`` disables attribute ids)
        strip_whitespace: Trim surrounding whitespace from leaf values
        forbid_dtd: Reject documents carrying any DOCTYPE declaration
        name: Optional preset name
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_field_length: int = DEFAULT_MAX_FIELD_LENGTH
    buffer_size: int = DEFAULT_BUFFER_SIZE

    record_element: str = "contact"
    group_element: str = "contacts"
    field_elements: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_FIELD_ELEMENTS), hash=False
    )
    id_attribute: Optional[str] = "id"

    strip_whitespace: bool = True
    forbid_dtd: bool = False

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_depth <= 0:
            raise ConfigValidationError(
                "max_depth must be > 0",
                field_name="max_depth",
                suggestions=[f"Use the default of {DEFAULT_MAX_DEPTH}"],
            )
        if self.max_field_length <= 0:
            raise ConfigValidationError(
                "max_field_length must be > 0", field_name="max_field_length"
            )
        if not (MIN_BUFFER_SIZE <= self.buffer_size <= MAX_BUFFER_SIZE):
            raise ConfigValidationError(
                f"buffer_size must be between {MIN_BUFFER_SIZE} and {MAX_BUFFER_SIZE}",
                field_name="buffer_size",
            )
        if not self.record_element:
            raise ConfigValidationError(
                "record_element cannot be empty", field_name="record_element"
            )
        if not self.group_element:
            raise ConfigValidationError(
                "group_element cannot be empty", field_name="group_element"
            )
        if self.record_element == self.group_element:
            raise ConfigValidationError(
                "record_element and group_element must differ",
                field_name="group_element",
            )
        self._validate_field_elements()

    def _validate_field_elements(self) -> None:
        """Check that leaf elements map onto real contact fields, then freeze them."""
        if not isinstance(self.field_elements, (dict, MappingProxyType)):
            raise ConfigValidationError(
                "field_elements must map element names to contact fields",
                field_name="field_elements",
            )
        structural = {self.record_element, self.group_element}
        for element, target in self.field_elements.items():
            if target not in CONTACT_FIELDS:
                raise ConfigValidationError(
                    f"Unknown contact field '{target}' for element '{element}'",
                    field_name="field_elements",
                    suggestions=[f"Map onto one of {list(CONTACT_FIELDS)}"],
                )
            if element in structural:
                raise ConfigValidationError(
                    f"Leaf element '{element}' collides with a structural element",
                    field_name="field_elements",
                )
        object.__setattr__(
            self, "field_elements", MappingProxyType(dict(self.field_elements))
        )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig().override(max_depth=50)
            >>> config.max_depth
            50
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(unknown)}",
                field_name=unknown[0],
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["field_elements"] = dict(self.field_elements)
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently dropped.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a JSON object")
        return cls().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ParserConfig":
        """Load configuration from a JSON file."""
        config_path = Path(path)
        try:
            content = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigValidationError(
                f"Could not read configuration file {config_path}: {e}"
            ) from e
        return cls.from_json(content)

    def harden(self) -> "ParserConfig":
        """Apply the untrusted-input policy on top of this configuration.

        DTDs are forbidden and the depth and field limits are lowered to the
        hardened values unless this configuration is already stricter. The
        element vocabulary and buffer size are kept.

        Example:
            >>> config = ParserConfig(record_element="person").harden()
            >>> config.record_element, config.max_depth, config.forbid_dtd
            ('person', 64, True)
        """
        return self.override(
            max_depth=min(self.max_depth, HARDENED_MAX_DEPTH),
            max_field_length=min(self.max_field_length, HARDENED_MAX_FIELD_LENGTH),
            forbid_dtd=True,
            name="hardened",
        )

    # Preset factory methods
    @classmethod
    def hardened(cls) -> "ParserConfig":
        """Create preset for untrusted uploads: no DTDs, shallow trees, short fields."""
        return cls().harden()
