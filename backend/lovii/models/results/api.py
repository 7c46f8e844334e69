"""
Result models returned by API handlers.
"""

from typing import Optional

from lovii.models.domain.base import CamelModel
from lovii.models.domain.profile import Profile


class ApiResult(CamelModel):
    """Base result for API operations."""
    success: bool


class ConnectResult(ApiResult):
    """Result of linking two profiles."""
    partner_id: str
    partner_name: Optional[str] = None


class BulkReplaceResult(ApiResult):
    """Result of replacing a profile's whole task list."""
    count: int = 0


class AuthResult(ApiResult):
    """Result of a registration or login."""
    user: Profile


class Deleted(CamelModel):
    status: str = "deleted"
    id: str
