"""Task domain model."""

from pydantic import Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from lovii.models.domain.base import CamelModel


class TaskCreate(CamelModel):
    """Payload for one task. ``profile_id`` may come from the query on bulk replace."""
    id: Optional[str] = None
    profile_id: Optional[str] = None
    text: str
    completed: bool = False


class Task(CamelModel):
    """Shared to-do item."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    profile_id: Optional[str] = None
    text: str
    completed: bool = False
    created_at: Optional[datetime] = None
