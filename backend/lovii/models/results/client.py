"""
Result models for sync client operations that are surfaced to the user.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional

from lovii.models.domain.profile import Profile
from lovii.models.domain.widget import PartnerSummary, WidgetState


class ClientResult(BaseModel):
    """Base result for user-facing client flows."""
    success: bool
    error: Optional[str] = None


class AuthOutcome(ClientResult):
    """Result of register/login."""
    user: Optional[Profile] = None


class ConnectOutcome(ClientResult):
    """Result of pairing with a partner code."""
    partner_id: Optional[str] = None
    partner_name: Optional[str] = None


class WidgetSendOutcome(ClientResult):
    """Result of relaying a note to the partner's widget."""
    partner: Optional[PartnerSummary] = None
    partner_widget: Optional[WidgetState] = None


class FlushResult(BaseModel):
    """What one outbox flush pass did."""
    sent: int = 0
    retried: int = 0
    dropped: int = 0
    remaining: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)
