"""
Profile management and partner linking.
"""

import secrets
import sqlite3
import string
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from lovii.database import connect, savepoint
from lovii.errors import NotFoundError, PartnerCodeExhaustedError, ValidationError
from lovii.logging import get_logger
from lovii.models import ConnectResult, Profile, ProfileCreate, ProfileUpsert, is_uuid

logger = get_logger('services.profile')

PARTNER_CODE_ALPHABET = string.ascii_uppercase + string.digits


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_partner_code(length: int = 6) -> str:
    return "".join(secrets.choice(PARTNER_CODE_ALPHABET) for _ in range(length))


def _row_to_profile(row: dict) -> Profile:
    return Profile(
        id=row["id"],
        name=row.get("name"),
        partner_code=row["partner_code"],
        partner_id=row.get("partner_id"),
        partner_name=row.get("partner_name"),
        anniversary=row.get("anniversary"),
        created_at=row["created_at"],
    )


def _is_code_collision(error: sqlite3.IntegrityError) -> bool:
    return "partner_code" in str(error)


class ProfileService:
    """Service for profile CRUD and the two-row partner link."""

    def __init__(self, db_path: str, code_length: int = 6, code_max_attempts: int = 5):
        self.db_path = db_path
        self.code_length = code_length
        self.code_max_attempts = max(int(code_max_attempts), 1)

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    async def _fetch(self, db: aiosqlite.Connection, column: str, value: str) -> dict | None:
        cursor = await db.execute(f"SELECT * FROM profiles WHERE {column} = ?", (value,))
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def get_profile(self, profile_id: str) -> Profile | None:
        db = await self._get_db()
        try:
            row = await self._fetch(db, "id", profile_id)
            return _row_to_profile(row) if row else None
        finally:
            await db.close()

    async def get_by_code(self, partner_code: str) -> Profile | None:
        db = await self._get_db()
        try:
            row = await self._fetch(db, "partner_code", partner_code)
            return _row_to_profile(row) if row else None
        finally:
            await db.close()

    async def get_credentials(self, partner_code: str) -> tuple[Profile, str | None] | None:
        db = await self._get_db()
        try:
            row = await self._fetch(db, "partner_code", partner_code)
            if not row:
                return None
            return _row_to_profile(row), row.get("password_hash")
        finally:
            await db.close()

    async def create_profile(
        self,
        data: ProfileCreate,
        *,
        profile_id: str | None = None,
        password_hash: str | None = None,
    ) -> Profile:
        """
        Insert a profile with a freshly allocated partner code.

        A code collision on the UNIQUE column is retried with a new code up to
        ``code_max_attempts`` times.
        """
        now = _now()
        profile_id = profile_id or str(uuid4())

        db = await self._get_db()
        try:
            for attempt in range(1, self.code_max_attempts + 1):
                code = generate_partner_code(self.code_length)
                try:
                    await db.execute(
                        """INSERT INTO profiles (id, partner_code, name, password_hash, created_at)
                           VALUES (?, ?, ?, ?, ?)""",
                        (profile_id, code, data.name, password_hash, now),
                    )
                    await db.commit()
                except sqlite3.IntegrityError as e:
                    await db.rollback()
                    if not _is_code_collision(e):
                        raise
                    logger.warning(
                        "Partner code collision (attempt %d/%d)", attempt, self.code_max_attempts
                    )
                    continue
                profile = Profile(id=profile_id, name=data.name, partner_code=code, created_at=now)
                logger.info(f"Created profile {profile.id[:8]} with code {code}")
                return profile
        finally:
            await db.close()

        raise PartnerCodeExhaustedError("Could not allocate a unique partner code")

    async def upsert_profile(self, data: ProfileUpsert) -> Profile:
        """Update the profile with ``data.id`` or create it; a non-UUID id is replaced."""
        profile_id = data.id if is_uuid(data.id) else None
        if data.id and profile_id is None:
            logger.info(f"Replacing malformed profile id {data.id!r} with a generated UUID")

        existing = await self.get_profile(profile_id) if profile_id else None
        if not existing:
            created = await self.create_profile(
                ProfileCreate(name=data.name), profile_id=profile_id or str(uuid4())
            )
            if data.partner_name is None and data.anniversary is None:
                return created
            existing = created

        fields: dict = {}
        if data.name is not None:
            fields["name"] = data.name
        if data.partner_name is not None:
            fields["partner_name"] = data.partner_name
        if data.anniversary is not None:
            fields["anniversary"] = data.anniversary

        if not fields:
            return existing

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        params = list(fields.values()) + [existing.id]

        db = await self._get_db()
        try:
            await db.execute(f"UPDATE profiles SET {set_clause} WHERE id = ?", params)
            await db.commit()
        finally:
            await db.close()

        return await self.get_profile(existing.id)

    async def connect(self, my_id: str, partner_code: str) -> ConnectResult:
        """
        Link the requester and the owner of ``partner_code`` to each other.

        Both rows are written inside one savepoint, so the link is either
        symmetric or absent.
        """
        db = await self._get_db()
        try:
            partner = await self._fetch(db, "partner_code", partner_code)
            if not partner:
                raise NotFoundError("Partner code not found")

            me = await self._fetch(db, "id", my_id)
            if not me:
                raise NotFoundError("Your account not found")

            if partner["id"] == me["id"]:
                raise ValidationError("You cannot connect to yourself")

            async with savepoint(db, "partner_link"):
                await db.execute(
                    "UPDATE profiles SET partner_id = ?, partner_name = ? WHERE id = ?",
                    (partner["id"], partner.get("name"), me["id"]),
                )
                await db.execute(
                    "UPDATE profiles SET partner_id = ?, partner_name = ? WHERE id = ?",
                    (me["id"], me.get("name"), partner["id"]),
                )
            await db.commit()
        finally:
            await db.close()

        logger.info(f"Linked profiles {me['id'][:8]} <-> {partner['id'][:8]}")
        return ConnectResult(
            success=True,
            partner_id=partner["id"],
            partner_name=partner.get("name"),
        )
