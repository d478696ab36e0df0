"""Tagging session state machine.

A session walks the user through the faces of one photo. It is ``EMPTY``
until a pipeline delivers at least one face, then ``ACTIVE`` with exactly one
face selected. Every operation is synchronous and must be called from the
event loop that owns the session; invalid requests are no-ops.

Pipeline results are tied to the generation returned by :meth:`begin`.
Any later :meth:`begin` or :meth:`reset` makes older generations stale, and
:meth:`load` ignores them.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from facetagger.contacts import Contact, ContactDirectory
    from facetagger.geometry import ImageSize
    from facetagger.thumbnails import Face

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    NEXT = "next"
    PREVIOUS = "previous"


class SessionState(StrEnum):
    EMPTY = "empty"
    ACTIVE = "active"


class TaggingSession:
    """Faces of the current photo, the selection cursor, and contact search."""

    def __init__(self, directory: ContactDirectory) -> None:
        self.directory = directory
        self.faces: list[Face] = []
        self.selected_index: int | None = None
        self.search_query: str = ""
        self.filtered_contacts: list[Contact] = directory.contacts
        self.image_size: ImageSize | None = None
        self.generation: int = 0

    # -- State --------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self.faces else SessionState.EMPTY

    @property
    def selected_face(self) -> Face | None:
        if self.selected_index is None:
            return None
        return self.faces[self.selected_index]

    def face_by_id(self, face_id: str) -> Face | None:
        return next((face for face in self.faces if face.id == face_id), None)

    # -- Pipeline hand-off --------------------------------------------------

    def begin(self, image_size: ImageSize) -> int:
        """Start over for a newly selected image and return its generation."""
        self.reset()
        self.image_size = image_size
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def load(self, generation: int, faces: list[Face]) -> bool:
        """Install pipeline results unless ``generation`` is stale.

        Returns:
            True if the faces were applied.
        """
        if not self.is_current(generation):
            logger.info(
                "Discarding %d faces from stale generation %d (current %d)",
                len(faces),
                generation,
                self.generation,
            )
            return False
        self.faces = list(faces)
        self.selected_index = 0 if self.faces else None
        logger.info("Session generation %d loaded with %d faces", generation, len(self.faces))
        return True

    # -- User intents -------------------------------------------------------

    def select(self, index: int) -> None:
        """Focus the face at ``index``. Out-of-range indexes are ignored."""
        if 0 <= index < len(self.faces):
            self.selected_index = index

    def advance(self, direction: Direction) -> None:
        """Move the selection one face forward or back, stopping at either end."""
        if self.selected_index is None:
            return
        step = 1 if direction is Direction.NEXT else -1
        target = self.selected_index + step
        if 0 <= target < len(self.faces):
            self.selected_index = target

    def swipe(self, dx: float, dy: float) -> None:
        """Translate a drag gesture into navigation.

        Only mostly-horizontal gestures count. Dragging left shows the next
        face, dragging right the previous one.
        """
        if abs(dx) <= abs(dy):
            return
        self.advance(Direction.NEXT if dx < 0 else Direction.PREVIOUS)

    def assign_contact(self, name: str) -> Contact | None:
        """Tag the selected face with ``name`` and move on to the next face.

        An existing contact with the same name (ignoring case) is reused,
        otherwise a new one is added to the directory. The search buffer is
        cleared since the typed text has been consumed.

        Returns:
            The assigned contact, or None if nothing was assigned.
        """
        face = self.selected_face
        cleaned = name.strip()
        if face is None or not cleaned:
            return None

        contact = self.directory.resolve(cleaned)
        face.contact = contact
        self.update_search("")
        self.advance(Direction.NEXT)
        return contact

    def update_search(self, query: str) -> list[Contact]:
        """Filter the directory by case-insensitive substring of the name."""
        self.search_query = query
        self.filtered_contacts = self.directory.search(query)
        return self.filtered_contacts

    def reset(self) -> None:
        """Drop all faces and search state. In-flight pipeline results become stale."""
        self.faces = []
        self.selected_index = None
        self.search_query = ""
        self.filtered_contacts = self.directory.contacts
        self.image_size = None
        self.generation += 1
