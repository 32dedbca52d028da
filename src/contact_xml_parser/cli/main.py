"""Main CLI entry point for the contact-xml command-line tool.

Provides parsing of contact XML files, directories and standard input with
JSON or text output, plus a validate command that only reports pass or fail.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from contact_xml_parser import __version__
from contact_xml_parser.api import (
    ContactXMLParser,
    ParseResult,
    StreamSource,
    dumps_response,
)
from contact_xml_parser.shared import ConfigError, ParserConfig, get_logger
from contact_xml_parser.tree import Contact

STDIN_MARKER = "-"
XML_SUFFIXES = {".xml"}


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self, parser_config: Optional[ParserConfig] = None) -> None:
        self.parser_config = parser_config or ParserConfig()
        self.output_format = "json"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CLIConfig":
        """Build the configuration from a config file and command-line overrides.

        Raises:
            ConfigError: If the config file or an override is invalid
        """
        config_path = getattr(args, "config", None)
        parser_config = (
            ParserConfig.from_file(config_path) if config_path else ParserConfig()
        )
        if getattr(args, "hardened", False):
            # Layered on the file config so its element vocabulary survives.
            parser_config = parser_config.harden()

        overrides: Dict[str, Any] = {}
        if getattr(args, "max_depth", None) is not None:
            overrides["max_depth"] = args.max_depth
        if getattr(args, "max_field_length", None) is not None:
            overrides["max_field_length"] = args.max_field_length
        if overrides:
            parser_config = parser_config.override(**overrides)

        config = cls(parser_config)
        config.output_format = getattr(args, "format", config.output_format)
        return config


class ContactFileProcessor:
    """Runs the parser over files and standard input for CLI commands."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.parser = ContactXMLParser(config.parser_config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def find_xml_files(self, path: Path, recursive: bool = False) -> Iterator[Path]:
        """Find XML files in path; explicit file arguments are always kept."""
        if path.is_dir():
            pattern = "**/*.xml" if recursive else "*.xml"
            for xml_file in sorted(path.glob(pattern)):
                if xml_file.is_file():
                    yield xml_file
        else:
            # Missing paths are reported by the parse itself.
            yield path

    def process(self, paths: List[str], recursive: bool = False) -> List[Tuple[str, ParseResult]]:
        """Parse every requested input in order."""
        results: List[Tuple[str, ParseResult]] = []
        for raw_path in paths:
            if raw_path == STDIN_MARKER:
                source = StreamSource(sys.stdin.buffer, description="stdin")
                results.append(("<stdin>", self.parser.parse_source(source)))
                continue
            for file_path in self.find_xml_files(Path(raw_path), recursive):
                results.append((str(file_path), self.parser.parse(file_path)))

        self.logger.debug(
            "Batch processed",
            extra={"inputs": len(results), "statistics": self.parser.statistics},
        )
        return results


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="contact-xml",
        description="Streaming contact XML parser with depth-bounded tree building"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse contact XML files")
    _add_input_arguments(parse_parser)
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Check contact XML files without printing contacts"
    )
    _add_input_arguments(validate_parser)
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def _add_input_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "paths",
        nargs="+",
        help="XML files or directories to parse ('-' reads standard input)"
    )
    subparser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    subparser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file"
    )
    subparser.add_argument(
        "--hardened",
        action="store_true",
        help="Apply the hardened limits for untrusted input on top of --config"
    )
    subparser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum contact nesting depth"
    )
    subparser.add_argument(
        "--max-field-length",
        type=int,
        help="Maximum characters in one contact field"
    )


def result_to_dict(label: str, result: ParseResult) -> Dict[str, Any]:
    """Response dictionary for one input, tagged with where it came from."""
    rendered = {"file": label}
    rendered.update(result.to_response())
    return rendered


def render_contact_tree(contacts: Tuple[Contact, ...], indent: str = "  ") -> List[str]:
    """Render contacts as indented text lines, one contact per line."""
    lines: List[str] = []
    stack: List[Tuple[Contact, int]] = [(contact, 0) for contact in reversed(contacts)]
    while stack:
        contact, level = stack.pop()
        contact_id = contact.id if contact.id else "N/A"
        lines.append(f"{indent * level}- {contact.display_name()} (id: {contact_id})")
        stack.extend((child, level + 1) for child in reversed(contact.contacts))
    return lines


def format_results(results: List[Tuple[str, ParseResult]], format_type: str) -> str:
    """Format processing results for output."""
    if format_type == "text":
        if not results:
            return "No results to display."

        successful = sum(1 for _, result in results if result.success)
        lines = [f"Processed {len(results)} inputs, {successful} successful", "-" * 60]
        for label, result in results:
            if result.success:
                lines.append(f"OK   {label} ({result.count} contacts)")
                lines.extend(
                    f"     {line}" for line in render_contact_tree(result.contacts)
                )
            else:
                kind = result.error_kind.value if result.error_kind else "UNKNOWN"
                lines.append(f"FAIL {label} [{kind}]")
                lines.append(f"     {result.error}")
            lines.append("")
        return "\n".join(lines)

    # Contact trees can nest deeper than json.dumps can recurse.
    return dumps_response(
        [result_to_dict(label, result) for label, result in results], indent=2
    )


def format_validation(results: List[Tuple[str, ParseResult]], format_type: str) -> str:
    """Format validation results, without the contacts themselves."""
    summaries = []
    for label, result in results:
        summary: Dict[str, Any] = {"file": label, "valid": result.success}
        if result.success:
            summary["count"] = result.count
        else:
            summary.update({
                "errorType": result.error_kind.value if result.error_kind else None,
                "error": result.error,
            })
        summaries.append(summary)

    if format_type == "json":
        return json.dumps(summaries, indent=2)

    valid_count = sum(1 for summary in summaries if summary["valid"])
    lines = [f"Validated {len(summaries)} inputs, {valid_count} valid", "-" * 50]
    for summary in summaries:
        status = "OK  " if summary["valid"] else "FAIL"
        lines.append(f"{status} {summary['file']}")
        if not summary["valid"]:
            lines.append(f"     {summary['errorType']}: {summary['error']}")
    return "\n".join(lines)


def _exit_code(results: List[Tuple[str, ParseResult]]) -> int:
    if not results:
        return 1
    return 0 if all(result.success for _, result in results) else 1


def _load_config(args: argparse.Namespace) -> Optional[CLIConfig]:
    try:
        return CLIConfig.from_args(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return None


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    config = _load_config(args)
    if config is None:
        return 2

    results = ContactFileProcessor(config).process(args.paths, args.recursive)
    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    return _exit_code(results)


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    config = _load_config(args)
    if config is None:
        return 2

    results = ContactFileProcessor(config).process(args.paths, args.recursive)
    print(format_validation(results, args.format))
    return _exit_code(results)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    # Route to appropriate command handler
    try:
        if args.command == "parse":
            return cmd_parse(args)
        if args.command == "validate":
            return cmd_validate(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
