"""Registration and login payloads."""

from pydantic import Field
from typing import Optional

from lovii.models.domain.base import CamelModel


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    password: str = Field(min_length=1)


class LoginRequest(CamelModel):
    code: str
    password: str
