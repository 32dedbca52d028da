"""Tests for parser configuration."""

import json

import pytest

from contact_xml_parser.shared.config import (
    DEFAULT_FIELD_ELEMENTS,
    DEFAULT_MAX_DEPTH,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)


class TestParserConfigDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = ParserConfig()

        assert config.max_depth == DEFAULT_MAX_DEPTH == 1000
        assert config.max_field_length == 64 * 1024
        assert config.buffer_size == 8192
        assert config.record_element == "contact"
        assert config.group_element == "contacts"
        assert config.field_elements == DEFAULT_FIELD_ELEMENTS
        assert config.id_attribute == "id"
        assert config.strip_whitespace is True
        assert config.forbid_dtd is False

    def test_field_elements_not_shared(self):
        """Each instance gets its own mapping."""
        assert ParserConfig().field_elements is not ParserConfig().field_elements

    def test_frozen(self):
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.max_depth = 5  # type: ignore[misc]

    def test_field_elements_read_only(self):
        config = ParserConfig()

        with pytest.raises(TypeError):
            config.field_elements["email"] = "name"  # type: ignore[index]
        assert "email" not in config.field_elements

    def test_caller_mapping_copied(self):
        mapping = {"given": "name"}
        config = ParserConfig(field_elements=mapping)

        mapping["family"] = "last_name"

        assert dict(config.field_elements) == {"given": "name"}

    def test_hashable(self):
        assert hash(ParserConfig()) == hash(ParserConfig())
        assert len({ParserConfig(), ParserConfig(), ParserConfig.hardened()}) == 2

    def test_equality_includes_field_elements(self):
        assert ParserConfig() == ParserConfig(field_elements=dict(DEFAULT_FIELD_ELEMENTS))
        assert ParserConfig() != ParserConfig(field_elements={"id": "id"})


class TestParserConfigValidation:
    """Test __post_init__ validation."""

    @pytest.mark.parametrize("field_name", ["max_depth", "max_field_length"])
    def test_non_positive_limits_rejected(self, field_name):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(**{field_name: 0})
        assert exc_info.value.field_name == field_name

    def test_buffer_size_range(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(buffer_size=0)
        assert exc_info.value.field_name == "buffer_size"

    def test_record_and_group_must_differ(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig(record_element="item", group_element="item")

    def test_empty_record_element(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig(record_element="")

    def test_unknown_field_target(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(field_elements={"email": "email"})
        assert exc_info.value.suggestions

    def test_leaf_colliding_with_structure(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig(field_elements={"contact": "name"})

    def test_validation_error_is_config_error(self):
        assert issubclass(ConfigValidationError, ConfigError)

    def test_suggestion_for_depth(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(max_depth=-1)
        assert "1000" in exc_info.value.suggestions[0]


class TestParserConfigOverride:
    """Test override and presets."""

    def test_override_returns_new_instance(self):
        base = ParserConfig()
        changed = base.override(max_depth=10)

        assert changed.max_depth == 10
        assert base.max_depth == DEFAULT_MAX_DEPTH

    def test_override_unknown_field(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(max_width=3)
        assert exc_info.value.field_name == "max_width"

    def test_override_revalidates(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(max_depth=0)

    def test_hardened_preset(self):
        config = ParserConfig.hardened()

        assert config.forbid_dtd is True
        assert config.max_depth < DEFAULT_MAX_DEPTH
        assert config.max_field_length == 1024
        assert config.name == "hardened"

    def test_harden_keeps_vocabulary(self):
        base = ParserConfig(
            record_element="person",
            group_element="people",
            buffer_size=512,
            field_elements={"given": "name"},
        )

        config = base.harden()

        assert config.record_element == "person"
        assert config.group_element == "people"
        assert config.buffer_size == 512
        assert dict(config.field_elements) == {"given": "name"}
        assert config.forbid_dtd is True
        assert config.max_depth == 64
        assert config.name == "hardened"

    def test_harden_keeps_stricter_limits(self):
        config = ParserConfig(max_depth=10, max_field_length=50).harden()

        assert config.max_depth == 10
        assert config.max_field_length == 50

    def test_field_elements_must_be_mapping(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig.from_dict({"field_elements": ["id"]})
        assert exc_info.value.field_name == "field_elements"


class TestParserConfigSerialization:
    """Test dict/JSON/file round trips."""

    def test_to_dict_and_back(self):
        config = ParserConfig(max_depth=7, name="custom")
        restored = ParserConfig.from_dict(config.to_dict())

        assert restored == config

    def test_to_json(self):
        data = json.loads(ParserConfig(max_depth=3).to_json())
        assert data["max_depth"] == 3
        assert data["field_elements"]["lastName"] == "last_name"

    def test_to_dict_field_elements_is_plain_dict(self):
        data = ParserConfig().to_dict()

        assert type(data["field_elements"]) is dict
        data["field_elements"]["email"] = "name"
        assert "email" not in ParserConfig().field_elements

    def test_from_json_partial(self):
        config = ParserConfig.from_json('{"max_field_length": 10}')

        assert config.max_field_length == 10
        assert config.max_depth == DEFAULT_MAX_DEPTH

    def test_from_json_invalid(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_json("{not json")

    def test_from_dict_requires_object(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict(["max_depth", 3])  # type: ignore[arg-type]

    def test_from_file(self, tmp_path):
        path = tmp_path / "parser.json"
        path.write_text(json.dumps({"forbid_dtd": True, "max_depth": 20}))

        config = ParserConfig.from_file(path)

        assert config.forbid_dtd is True
        assert config.max_depth == 20

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_file(tmp_path / "missing.json")
