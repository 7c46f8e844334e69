"""Widget relay models: what a partner's display surface shows."""

from typing import Optional

from lovii.models.domain.base import CamelModel
from lovii.models.domain.note import Note, NoteBase


class WidgetNoteIn(NoteBase):
    """A note sent through the widget relay; ``id`` is optional."""
    id: Optional[str] = None


class WidgetSendRequest(CamelModel):
    my_id: str
    note: WidgetNoteIn


class WidgetNoteSummary(CamelModel):
    type: str
    content: str
    timestamp: int
    color: Optional[str] = None


class WidgetState(CamelModel):
    has_note: bool = False
    last_note: Optional[WidgetNoteSummary] = None


class PartnerSummary(CamelModel):
    id: str
    name: Optional[str] = None
    code: str
    connected: bool = True


class WidgetSendResult(CamelModel):
    success: bool = True
    note: Note
    partner: PartnerSummary
    partner_widget: WidgetState


class WidgetStatus(CamelModel):
    connected: bool
    partner: Optional[PartnerSummary] = None
    widget: Optional[WidgetState] = None
