"""Profile domain model."""

from pydantic import Field
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from lovii.models.domain.base import CamelModel


class ProfileCreate(CamelModel):
    """Payload for creating a profile."""
    name: Optional[str] = None


class ProfileUpsert(CamelModel):
    """Payload for creating-or-updating a profile by id."""
    id: Optional[str] = None
    name: Optional[str] = None
    partner_name: Optional[str] = None
    anniversary: Optional[int] = None


class Profile(CamelModel):
    """One side of a couple. ``partner_id`` links to the other side."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: Optional[str] = None
    partner_code: str
    partner_id: Optional[str] = None
    partner_name: Optional[str] = None
    anniversary: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ConnectRequest(CamelModel):
    """Payload for linking the requester to the profile owning ``partner_code``."""
    my_id: str
    partner_code: str
