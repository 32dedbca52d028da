"""Shared fixtures for contact XML parser tests."""

import pytest


def build_nested_xml(depth: int) -> str:
    """Contacts nested ``depth`` records deep, each wrapping the next in <contacts>."""
    opening = "".join(
        f"<contacts><contact><id>{level}</id>" for level in range(1, depth + 1)
    )
    closing = "</contact></contacts>" * depth
    return opening + closing


@pytest.fixture
def nested_xml():
    """Factory fixture producing nested contact documents of a given depth."""
    return build_nested_xml


@pytest.fixture
def sample_xml() -> str:
    return (
        "<contacts>"
        "<contact><id>1</id><name>Ann</name><lastName>Lee</lastName>"
        "<contacts>"
        "<contact><id>2</id><name>Bo</name></contact>"
        "<contact><id>3</id><name>Cy</name></contact>"
        "</contacts>"
        "</contact>"
        "<contact><id>4</id><name>Di</name></contact>"
        "</contacts>"
    )
