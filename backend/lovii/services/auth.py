"""
Password registration and login against partner codes.
"""

import asyncio

import bcrypt

from lovii.errors import AuthenticationError
from lovii.logging import get_logger
from lovii.models import AuthResult, ProfileCreate
from lovii.services.profile import ProfileService

logger = get_logger('services.auth')

# bcrypt only reads the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, stored: str | None) -> bool:
    if not stored:
        return False
    try:
        return bcrypt.checkpw(_encode(password), stored.encode("ascii"))
    except ValueError:
        # Not a bcrypt hash.
        return False


class AuthService:
    def __init__(self, profiles: ProfileService, rounds: int = 12):
        self.profiles = profiles
        self.rounds = rounds

    async def register(self, name: str | None, password: str) -> AuthResult:
        password_hash = await asyncio.to_thread(hash_password, password, self.rounds)
        profile = await self.profiles.create_profile(
            ProfileCreate(name=name or "Anonymous"),
            password_hash=password_hash,
        )
        return AuthResult(success=True, user=profile)

    async def login(self, code: str, password: str) -> AuthResult:
        found = await self.profiles.get_credentials(code)
        if not found or not await asyncio.to_thread(verify_password, password, found[1]):
            logger.info("Rejected login for code %s", code)
            raise AuthenticationError("Invalid credentials")
        return AuthResult(success=True, user=found[0])
