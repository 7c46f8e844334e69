"""Exception hierarchy for the Lovii sync client."""
from __future__ import annotations

from typing import Any, Dict, Optional


class ApiError(Exception):
    """A non-2xx answer from the API, carrying its ``error`` message."""

    def __init__(
        self,
        status_code: Optional[int],
        message: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}

    def __str__(self) -> str:  # pragma: no cover - convenience string repr
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class NotFoundError(ApiError):
    """Raised for HTTP 404 responses."""


class TransientNetworkError(ApiError):
    """Transport failure, 429 or 5xx: worth retrying later."""


def is_transient(error: BaseException) -> bool:
    return isinstance(error, TransientNetworkError)
