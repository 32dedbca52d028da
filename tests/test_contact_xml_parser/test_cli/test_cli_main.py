"""Tests for the CLI main module."""

import io
import json
from unittest.mock import patch

import pytest

from contact_xml_parser.cli.main import (
    CLIConfig,
    ContactFileProcessor,
    create_argument_parser,
    format_results,
    main,
    render_contact_tree,
)
from contact_xml_parser.shared import ConfigValidationError
from contact_xml_parser.tree import Contact


@pytest.fixture
def xml_dir(tmp_path, sample_xml):
    (tmp_path / "good.xml").write_text(sample_xml, encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not xml")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "bad.xml").write_text("<contacts><contact>")
    return tmp_path


class TestCLIConfig:
    """Test CLI configuration management."""

    def test_defaults(self):
        args = create_argument_parser().parse_args(["parse", "x.xml"])
        config = CLIConfig.from_args(args)

        assert config.parser_config.max_depth == 1000
        assert config.output_format == "json"

    def test_overrides(self):
        args = create_argument_parser().parse_args(
            ["parse", "x.xml", "--max-depth", "5", "--max-field-length", "9"]
        )
        config = CLIConfig.from_args(args)

        assert config.parser_config.max_depth == 5
        assert config.parser_config.max_field_length == 9

    def test_config_file(self, tmp_path):
        config_path = tmp_path / "parser.json"
        config_path.write_text(json.dumps({"max_depth": 3, "forbid_dtd": True}))
        args = create_argument_parser().parse_args(["parse", "x.xml", "-c", str(config_path)])

        config = CLIConfig.from_args(args)

        assert config.parser_config.max_depth == 3
        assert config.parser_config.forbid_dtd is True

    def test_hardened_flag(self):
        args = create_argument_parser().parse_args(["validate", "x.xml", "--hardened"])

        assert CLIConfig.from_args(args).parser_config.name == "hardened"

    def test_hardened_flag_layers_over_config_file(self, tmp_path):
        config_path = tmp_path / "people.json"
        config_path.write_text(json.dumps({
            "record_element": "person",
            "group_element": "people",
            "buffer_size": 512,
            "max_depth": 5000,
        }))
        args = create_argument_parser().parse_args(
            ["parse", "x.xml", "-c", str(config_path), "--hardened"]
        )

        config = CLIConfig.from_args(args).parser_config

        assert config.record_element == "person"
        assert config.group_element == "people"
        assert config.buffer_size == 512
        assert config.forbid_dtd is True
        assert config.max_depth == 64
        assert config.max_field_length == 1024

    def test_hardened_keeps_tighter_file_limits(self, tmp_path):
        config_path = tmp_path / "strict.json"
        config_path.write_text(json.dumps({"max_depth": 8}))
        args = create_argument_parser().parse_args(
            ["parse", "x.xml", "-c", str(config_path), "--hardened", "--max-field-length", "99"]
        )

        config = CLIConfig.from_args(args).parser_config

        assert config.max_depth == 8
        assert config.max_field_length == 99
        assert config.forbid_dtd is True

    def test_invalid_override(self):
        args = create_argument_parser().parse_args(["parse", "x.xml", "--max-depth", "0"])

        with pytest.raises(ConfigValidationError):
            CLIConfig.from_args(args)


class TestContactFileProcessor:
    """Test file discovery and batch parsing."""

    def test_find_xml_files_non_recursive(self, xml_dir):
        processor = ContactFileProcessor(CLIConfig())

        found = list(processor.find_xml_files(xml_dir))

        assert [path.name for path in found] == ["good.xml"]

    def test_find_xml_files_recursive(self, xml_dir):
        processor = ContactFileProcessor(CLIConfig())

        found = {path.name for path in processor.find_xml_files(xml_dir, recursive=True)}

        assert found == {"good.xml", "bad.xml"}

    def test_process_missing_file(self, tmp_path):
        processor = ContactFileProcessor(CLIConfig())

        results = processor.process([str(tmp_path / "missing.xml")])

        assert len(results) == 1
        assert results[0][1].success is False


class TestFormatting:
    """Test output formatting."""

    def test_render_contact_tree(self):
        contacts = (
            Contact(id="1", name="Ann", last_name="Lee", contacts=(Contact(name="Bo"),)),
            Contact(),
        )

        assert render_contact_tree(contacts) == [
            "- Ann Lee (id: 1)",
            "  - Bo (id: N/A)",
            "- N/A (id: N/A)",
        ]

    def test_format_json(self, xml_dir):
        results = ContactFileProcessor(CLIConfig()).process([str(xml_dir / "good.xml")])

        data = json.loads(format_results(results, "json"))

        assert data[0]["success"] is True
        assert data[0]["count"] == 2
        assert data[0]["file"].endswith("good.xml")

    def test_format_text_failure(self, xml_dir):
        results = ContactFileProcessor(CLIConfig()).process(
            [str(xml_dir / "nested" / "bad.xml")]
        )

        output = format_results(results, "text")

        assert "FAIL" in output
        assert "[INCOMPLETE_DOCUMENT]" in output

    def test_format_text_empty(self):
        assert format_results([], "text") == "No results to display."


class TestMain:
    """Test the CLI entry point and exit codes."""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_parse_success(self, xml_dir, capsys):
        exit_code = main(["parse", str(xml_dir / "good.xml")])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["contacts"][0]["name"] == "Ann"

    def test_parse_tree_at_default_depth_limit(self, tmp_path, nested_xml, capsys):
        deep_path = tmp_path / "deep.xml"
        deep_path.write_text(nested_xml(1000), encoding="utf-8")

        exit_code = main(["parse", str(deep_path)])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert output.count('"id": ') == 1000
        assert '"id": "1000"' in output
        assert '"success": true' in output

    def test_parse_text_at_default_depth_limit(self, tmp_path, nested_xml, capsys):
        deep_path = tmp_path / "deep.xml"
        deep_path.write_text(nested_xml(1000), encoding="utf-8")

        assert main(["parse", "-f", "text", str(deep_path)]) == 0
        assert "(id: 1000)" in capsys.readouterr().out

    def test_parse_directory_with_failure(self, xml_dir, capsys):
        exit_code = main(["parse", "-r", "-f", "text", str(xml_dir)])

        assert exit_code == 1
        output = capsys.readouterr().out
        assert "Processed 2 inputs, 1 successful" in output
        assert "- Ann Lee (id: 1)" in output

    def test_parse_to_output_file(self, xml_dir, tmp_path, capsys):
        output_path = tmp_path / "out.json"

        exit_code = main(["parse", str(xml_dir / "good.xml"), "-o", str(output_path)])

        assert exit_code == 0
        assert json.loads(output_path.read_text())[0]["count"] == 2

    def test_parse_stdin(self, capsys):
        fake_stdin = io.TextIOWrapper(io.BytesIO(b"<contacts><contact/></contacts>"))

        with patch("sys.stdin", fake_stdin):
            exit_code = main(["parse", "-"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)[0]["file"] == "<stdin>"

    def test_validate(self, xml_dir, capsys):
        exit_code = main(["validate", str(xml_dir / "good.xml"), str(xml_dir / "nested" / "bad.xml")])

        assert exit_code == 1
        output = capsys.readouterr().out
        assert "Validated 2 inputs, 1 valid" in output
        assert "INCOMPLETE_DOCUMENT" in output

    def test_validate_json(self, xml_dir, capsys):
        exit_code = main(["validate", "-f", "json", str(xml_dir / "good.xml")])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"file": str(xml_dir / "good.xml"), "valid": True, "count": 2}
        ]

    def test_invalid_config_exit_code(self, xml_dir, capsys):
        exit_code = main(["parse", "--max-depth", "0", str(xml_dir / "good.xml")])

        assert exit_code == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_verbose_configures_logging(self, xml_dir):
        with patch("contact_xml_parser.cli.main.logging.basicConfig") as basic_config:
            main(["--verbose", "validate", str(xml_dir / "good.xml")])

        basic_config.assert_called_once()
