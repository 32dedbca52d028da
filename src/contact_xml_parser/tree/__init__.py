"""Contact tree building engine.

This module reconstructs the recursive contact hierarchy from a parse event
sequence using an explicit, depth-bounded stack of frames.

Key Components:
    ContactTreeBuilder: Event-driven state machine over contact frames
    ContactTreeAssembler: Attaches finalized contacts to parents or the root list
    ContactFrame: Mutable in-progress contact on the stack
    Contact: Immutable contact with nested sub-contacts
"""

from .assembly import ContactFrame, ContactTreeAssembler
from .builder import ContactTreeBuilder, ElementRole
from .contact import Contact

__all__ = [
    "Contact",
    "ContactFrame",
    "ContactTreeAssembler",
    "ContactTreeBuilder",
    "ElementRole",
]
