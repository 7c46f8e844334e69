"""Relay notes to a partner's display surface and report what it shows."""

from lovii.errors import NotFoundError, ValidationError
from lovii.logging import get_logger
from lovii.models import (
    Note,
    NoteCreate,
    PartnerSummary,
    Profile,
    WidgetNoteIn,
    WidgetNoteSummary,
    WidgetSendResult,
    WidgetState,
    WidgetStatus,
)
from lovii.services.notes import NoteService
from lovii.services.profile import ProfileService

logger = get_logger("services.widget")


def _summarize(note: Note | None) -> WidgetState:
    if note is None:
        return WidgetState(has_note=False, last_note=None)
    return WidgetState(
        has_note=True,
        last_note=WidgetNoteSummary(
            type=note.type.value,
            content=note.content,
            timestamp=note.timestamp,
            color=note.color,
        ),
    )


def _partner_summary(partner: Profile) -> PartnerSummary:
    return PartnerSummary(id=partner.id, name=partner.name, code=partner.partner_code)


class WidgetService:
    """Widget relay built on the profile link and the notes table."""

    def __init__(self, profiles: ProfileService, notes: NoteService):
        self.profiles = profiles
        self.notes = notes

    async def _partner_of(self, profile: Profile) -> Profile | None:
        if not profile.partner_id:
            return None
        return await self.profiles.get_profile(profile.partner_id)

    async def send(self, my_id: str, note: WidgetNoteIn) -> WidgetSendResult:
        me = await self.profiles.get_profile(my_id)
        if not me:
            raise NotFoundError("User not found")
        if not me.partner_id:
            raise ValidationError("No partner connected")
        partner = await self._partner_of(me)
        if not partner:
            raise NotFoundError("Partner not found in database")

        saved = await self.notes.create_note(
            NoteCreate(profile_id=my_id, **note.model_dump())
        )
        partner_latest = await self.notes.latest_note(partner.id)
        logger.info(f"Relayed note {saved.id[:8]} to partner {partner.id[:8]}")

        return WidgetSendResult(
            success=True,
            note=saved,
            partner=_partner_summary(partner),
            partner_widget=_summarize(partner_latest),
        )

    async def status(self, my_id: str) -> WidgetStatus:
        me = await self.profiles.get_profile(my_id)
        partner = await self._partner_of(me) if me else None
        if not partner:
            return WidgetStatus(connected=False)
        latest = await self.notes.latest_note(partner.id)
        return WidgetStatus(
            connected=True,
            partner=_partner_summary(partner),
            widget=_summarize(latest),
        )
