"""In-memory contact directory used while tagging."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Contact:
    """A person a face can be tagged with."""

    name: str
    id: str = field(default_factory=_new_id)


class ContactDirectory:
    """Ordered collection of contacts with name lookup and search."""

    def __init__(self, contacts: Iterable[Contact] = ()) -> None:
        self._contacts: list[Contact] = list(contacts)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> ContactDirectory:
        return cls(Contact(name=name) for name in names)

    @property
    def contacts(self) -> list[Contact]:
        return list(self._contacts)

    def search(self, query: str) -> list[Contact]:
        """Return contacts whose name contains ``query``, ignoring case.

        An empty query matches everyone.
        """
        needle = query.casefold()
        return [c for c in self._contacts if needle in c.name.casefold()]

    def find(self, name: str) -> Contact | None:
        """Return the first contact whose name equals ``name``, ignoring case."""
        wanted = name.casefold()
        return next((c for c in self._contacts if c.name.casefold() == wanted), None)

    def resolve(self, name: str) -> Contact:
        """Return the matching contact, adding a new one if none exists."""
        existing = self.find(name)
        if existing is not None:
            return existing
        contact = Contact(name=name)
        self._contacts.append(contact)
        logger.info("Created contact %r", name)
        return contact
