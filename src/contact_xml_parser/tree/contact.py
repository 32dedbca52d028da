"""Contact domain model.

Contacts form trees of unbounded depth, so every traversal in this module
uses an explicit stack instead of Python recursion.
"""

from dataclasses import dataclass
from itertools import zip_longest
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Serialized names used by the front ends
FIELD_KEYS = (("id", "id"), ("name", "name"), ("last_name", "lastName"))


@dataclass(frozen=True, eq=False, repr=False)
class Contact:
    """Immutable contact record with nested sub-contacts.

    Absent fields are ``None``; a field that was present in the source but
    empty is ``""``. Equality and hashing compare whole subtrees, walking
    them without recursion.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    last_name: Optional[str] = None
    contacts: Tuple["Contact", ...] = ()

    def __post_init__(self) -> None:
        """Normalize ``contacts`` to a tuple."""
        if not isinstance(self.contacts, tuple):
            object.__setattr__(self, "contacts", tuple(self.contacts))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Contact):
            return NotImplemented
        if self is other:
            return True
        # Pre-order rows with child counts pin down the tree shape.
        return all(
            mine == theirs
            for mine, theirs in zip_longest(self._shape(), other._shape())
        )

    def __hash__(self) -> int:
        return hash(tuple(self._shape()))

    def __repr__(self) -> str:
        return (
            f"Contact(id={self.id!r}, name={self.name!r}, "
            f"last_name={self.last_name!r}, contacts=<{len(self.contacts)}>)"
        )

    def _shape(self) -> Iterator[Tuple[Optional[str], Optional[str], Optional[str], int]]:
        for contact in self.iter_tree():
            yield contact.id, contact.name, contact.last_name, len(contact.contacts)

    @property
    def has_sub_contacts(self) -> bool:
        return len(self.contacts) > 0

    @property
    def depth(self) -> int:
        """Height of the subtree rooted at this contact (a leaf has depth 1)."""
        deepest = 0
        stack: List[Tuple[Contact, int]] = [(self, 1)]
        while stack:
            contact, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in contact.contacts)
        return deepest

    def iter_tree(self) -> Iterator["Contact"]:
        """Yield this contact and all descendants depth-first in document order."""
        stack: List[Contact] = [self]
        while stack:
            contact = stack.pop()
            yield contact
            stack.extend(reversed(contact.contacts))

    def _fields_dict(self) -> Dict[str, Any]:
        return {
            key: getattr(self, attr)
            for attr, key in FIELD_KEYS
            if getattr(self, attr) is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        """Render the ``{id?, name?, lastName?, contacts}`` shape the front ends consume."""
        root = self._fields_dict()
        stack: List[Tuple[Contact, Dict[str, Any]]] = [(self, root)]
        while stack:
            contact, rendered = stack.pop()
            children: List[Dict[str, Any]] = []
            rendered["contacts"] = children
            for child in contact.contacts:
                child_rendered = child._fields_dict()
                children.append(child_rendered)
                stack.append((child, child_rendered))
        return root

    def display_name(self, placeholder: str = "N/A") -> str:
        """Full name as shown on a contact card."""
        parts = [part for part in (self.name, self.last_name) if part]
        return " ".join(parts) if parts else placeholder
