"""Note routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from lovii.dependencies import NoteServiceDep, ProfileServiceDep
from lovii.errors import NotFoundError, ValidationError
from lovii.models import Deleted, Note, NoteCreate, NoteUpdate
from lovii.realtime import notify_partner

router = APIRouter()


@router.get("", response_model=list[Note])
async def list_notes(
    service: NoteServiceDep,
    profile_id: Annotated[Optional[str], Query(alias="profileId")] = None,
    partner_id: Annotated[Optional[str], Query(alias="partnerId")] = None,
):
    if not profile_id:
        raise ValidationError("Profile ID required")
    return await service.list_notes(partner_id or profile_id)


@router.post("", response_model=Note, status_code=201)
async def create_note(body: NoteCreate, service: NoteServiceDep, profiles: ProfileServiceDep):
    note = await service.create_note(body)
    owner = await profiles.get_profile(note.profile_id)
    if owner:
        await notify_partner(owner.partner_id, note)
    return note


@router.patch("", response_model=Note)
async def update_note(body: NoteUpdate, service: NoteServiceDep):
    note = await service.update_note(body)
    if not note:
        raise NotFoundError("Note not found")
    return note


@router.delete("", response_model=Deleted)
async def delete_note(
    service: NoteServiceDep,
    note_id: Annotated[Optional[str], Query(alias="id")] = None,
):
    if not note_id:
        raise ValidationError("ID required")
    deleted = await service.delete_note(note_id)
    if not deleted:
        raise NotFoundError("Note not found")
    return Deleted(id=note_id)
