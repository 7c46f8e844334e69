"""
Lovii models.

Usage:
    from lovii.models import Profile, Note, NoteCreate, Task
    from lovii.models import NoteType, ConnectResult, FlushResult
"""

# --- Enums ---
from lovii.models.enums import NoteType, OutboxMethod

# --- Domain models ---
from lovii.models.domain import (
    CamelModel, is_uuid,
    Profile, ProfileCreate, ProfileUpsert, ConnectRequest,
    Note, NoteBase, NoteCreate, NoteUpdate,
    Task, TaskCreate,
    WidgetNoteIn, WidgetSendRequest, WidgetNoteSummary, WidgetState,
    PartnerSummary, WidgetSendResult, WidgetStatus,
    RegisterRequest, LoginRequest,
)

# --- Result models ---
from lovii.models.results import (
    ApiResult, ConnectResult, BulkReplaceResult, AuthResult, Deleted,
    ClientResult, AuthOutcome, ConnectOutcome, WidgetSendOutcome, FlushResult,
)

__all__ = [
    # Enums
    "NoteType", "OutboxMethod",
    # Domain
    "CamelModel", "is_uuid",
    "Profile", "ProfileCreate", "ProfileUpsert", "ConnectRequest",
    "Note", "NoteBase", "NoteCreate", "NoteUpdate",
    "Task", "TaskCreate",
    "WidgetNoteIn", "WidgetSendRequest", "WidgetNoteSummary", "WidgetState",
    "PartnerSummary", "WidgetSendResult", "WidgetStatus",
    "RegisterRequest", "LoginRequest",
    # Results
    "ApiResult", "ConnectResult", "BulkReplaceResult", "AuthResult", "Deleted",
    "ClientResult", "AuthOutcome", "ConnectOutcome", "WidgetSendOutcome", "FlushResult",
]
