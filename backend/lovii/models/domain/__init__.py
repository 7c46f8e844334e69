"""Domain models: profiles, notes, tasks and the widget relay."""

from lovii.models.domain.base import CamelModel, is_uuid
from lovii.models.domain.profile import Profile, ProfileCreate, ProfileUpsert, ConnectRequest
from lovii.models.domain.note import Note, NoteBase, NoteCreate, NoteUpdate
from lovii.models.domain.task import Task, TaskCreate
from lovii.models.domain.widget import (
    WidgetNoteIn,
    WidgetSendRequest,
    WidgetNoteSummary,
    WidgetState,
    PartnerSummary,
    WidgetSendResult,
    WidgetStatus,
)
from lovii.models.domain.auth import RegisterRequest, LoginRequest

__all__ = [
    "CamelModel", "is_uuid",
    "Profile", "ProfileCreate", "ProfileUpsert", "ConnectRequest",
    "Note", "NoteBase", "NoteCreate", "NoteUpdate",
    "Task", "TaskCreate",
    "WidgetNoteIn", "WidgetSendRequest", "WidgetNoteSummary", "WidgetState",
    "PartnerSummary", "WidgetSendResult", "WidgetStatus",
    "RegisterRequest", "LoginRequest",
]
