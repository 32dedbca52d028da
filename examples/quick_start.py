#!/usr/bin/env python3
"""
Quick Start Guide for the Contact XML Parser.

This example walks through the three levels of the API: one-call parsing,
a configured reusable parser, and streaming root contacts as they close.
"""

import io
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contact_xml_parser import (
    ContactTreeBuilder,
    ContactXMLParser,
    ParserConfig,
    XMLEventSource,
    parse_string,
)

ADDRESS_BOOK = """<?xml version="1.0" encoding="UTF-8"?>
<contacts>
  <contact id="1">
    <name>Ann</name>
    <lastName>Lee</lastName>
    <contacts>
      <contact><id>2</id><name>Bo</name></contact>
      <contact><id>3</id><name>Cy</name><lastName>Park</lastName></contact>
    </contacts>
  </contact>
  <contact><id>4</id><name>Di</name></contact>
</contacts>
"""


def simple_parsing():
    """Level 1: parse a string and render the response contract."""
    print("Step 1: Simple parsing")
    print("-" * 30)

    result = parse_string(ADDRESS_BOOK)
    print(f"success={result.success} count={result.count}")
    for contact in result.iter_contacts():
        print(f"  {contact.display_name()} (id: {contact.id or 'N/A'})")
    print(result.to_json(indent=2))


def failure_handling():
    """Every input problem comes back as a failure result, never an exception."""
    print("\nStep 2: Failure handling")
    print("-" * 30)

    samples = {
        "truncated": "<contacts><contact><id>1</id></contact>",
        "mismatched": "<contacts><contact></contacts>",
        "empty": "",
        "entity bomb": '<!DOCTYPE x [<!ENTITY a "aaaa">]><contacts>&a;</contacts>',
    }
    for label, xml in samples.items():
        response = parse_string(xml).to_response()
        print(f"  {label:<11} -> {response['errorType']}: {response['error']}")


def configured_parser():
    """Level 2: a reusable parser with a hardened configuration."""
    print("\nStep 3: Configured parser")
    print("-" * 30)

    parser = ContactXMLParser(ParserConfig.hardened().override(max_depth=1))
    for xml in (ADDRESS_BOOK, "<contacts><contact><name>Solo</name></contact></contacts>"):
        result = parser.parse(xml)
        print(f"  success={result.success} error={result.error}")
    print(f"  statistics: {parser.statistics}")


def streaming_roots():
    """Level 3: handle each root-level contact as soon as it closes."""
    print("\nStep 4: Streaming root contacts")
    print("-" * 30)

    config = ParserConfig(buffer_size=64)
    events = XMLEventSource(io.StringIO(ADDRESS_BOOK), config)
    for contact in ContactTreeBuilder(config).iter_root_contacts(events):
        print(f"  root {contact.id}: {len(contact.contacts)} sub-contact(s)")


if __name__ == "__main__":
    simple_parsing()
    failure_handling()
    configured_parser()
    streaming_roots()
