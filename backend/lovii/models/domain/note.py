"""Note domain model."""

from pydantic import Field
from typing import Optional
from uuid import uuid4

from lovii.models.domain.base import CamelModel
from lovii.models.enums import NoteType

NULLABLE_NOTE_FIELDS = frozenset({"color", "images"})


class NoteBase(CamelModel):
    type: NoteType
    content: str = ""
    color: Optional[str] = None
    images: Optional[list[str]] = None
    timestamp: int
    pinned: bool = False
    bookmarked: bool = False


class NoteCreate(NoteBase):
    """Payload for creating a note. A client-generated UUID ``id`` is kept."""
    id: Optional[str] = None
    profile_id: str


class NoteUpdate(CamelModel):
    """
    Partial patch of a note, addressed by ``id``.

    Only fields present in the payload change. An explicit ``null`` clears
    ``color`` or ``images``; the other fields cannot be null and ignore it.
    """
    id: str
    type: Optional[NoteType] = None
    content: Optional[str] = None
    color: Optional[str] = None
    images: Optional[list[str]] = None
    timestamp: Optional[int] = None
    pinned: Optional[bool] = None
    bookmarked: Optional[bool] = None

    def changes(self) -> dict:
        """Supplied fields keyed by column name."""
        return {
            key: value
            for key, value in self.model_dump(exclude={"id"}, exclude_unset=True).items()
            if value is not None or key in NULLABLE_NOTE_FIELDS
        }


class Note(NoteBase):
    """A single shared message: text, drawing path data, or a photo collage."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    profile_id: Optional[str] = None
