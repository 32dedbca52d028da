"""Contact tree assembly.

Finalizes closed contact frames into immutable contacts and attaches each one
either to its parent frame or to the root-level sequence.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .contact import Contact


@dataclass
class ContactFrame:
    """In-progress contact on the builder stack.

    Frames are the only mutable form of a contact. A frame is mutated only
    while it is the top of the stack and is frozen exactly once, when its
    closing element is processed.
    """

    element: str
    depth: int
    id: Optional[str] = None
    name: Optional[str] = None
    last_name: Optional[str] = None
    children: List[Contact] = field(default_factory=list)

    def set_field(self, field_name: str, value: str) -> None:
        """Assign a leaf value; a repeated leaf overwrites the earlier value."""
        if field_name not in ("id", "name", "last_name"):
            raise ValueError(f"Unknown contact field: {field_name}")
        setattr(self, field_name, value)

    def attach(self, child: Contact) -> None:
        """Append a finalized sub-contact in arrival order."""
        self.children.append(child)

    def freeze(self) -> Contact:
        return Contact(
            id=self.id,
            name=self.name,
            last_name=self.last_name,
            contacts=tuple(self.children),
        )


class ContactTreeAssembler:
    """Collects finalized contacts into the root-level result sequence.

    ``count`` is the number of root-level contacts only; nested sub-contacts
    are reachable through each contact's ``contacts`` but are not counted.
    """

    def __init__(self) -> None:
        self._roots: List[Contact] = []
        self.contacts_built = 0
        self.max_depth_seen = 0

    def note_depth(self, depth: int) -> None:
        if depth > self.max_depth_seen:
            self.max_depth_seen = depth

    def finalize(self, frame: ContactFrame, parent: Optional[ContactFrame]) -> Contact:
        """Freeze ``frame`` and hand it to ``parent`` or to the root sequence.

        Args:
            frame: Frame just popped off the builder stack
            parent: New top of stack, or ``None`` when the stack is empty

        Returns:
            The immutable contact
        """
        contact = frame.freeze()
        if parent is None:
            self._roots.append(contact)
        else:
            parent.attach(contact)
        self.contacts_built += 1
        return contact

    @property
    def root_contacts(self) -> Tuple[Contact, ...]:
        return tuple(self._roots)

    @property
    def last_root(self) -> Optional[Contact]:
        return self._roots[-1] if self._roots else None

    @property
    def count(self) -> int:
        return len(self._roots)
