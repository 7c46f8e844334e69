"""Service error types raised by the API layer."""

from __future__ import annotations


class LoviiError(RuntimeError):
    """Base error carrying the HTTP status a handler should answer with."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(LoviiError):
    """Missing profile, partner or note."""

    status_code = 404


class ValidationError(LoviiError):
    """Missing or inconsistent request fields."""

    status_code = 400


class AuthenticationError(LoviiError):
    status_code = 401


class PartnerCodeExhaustedError(LoviiError):
    """No free partner code could be allocated."""

    status_code = 500


__all__ = [
    "LoviiError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "PartnerCodeExhaustedError",
]
