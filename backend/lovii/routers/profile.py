"""Profile endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from lovii.dependencies import ProfileServiceDep
from lovii.errors import NotFoundError, ValidationError
from lovii.models import Profile, ProfileCreate, ProfileUpsert

router = APIRouter()


@router.post("", response_model=Profile, status_code=201)
async def create_profile(service: ProfileServiceDep, body: Optional[ProfileCreate] = None):
    return await service.create_profile(body or ProfileCreate())


@router.put("", response_model=Profile)
async def upsert_profile(body: ProfileUpsert, service: ProfileServiceDep):
    return await service.upsert_profile(body)


@router.get("", response_model=Profile)
async def get_profile(
    service: ProfileServiceDep,
    profile_id: Annotated[Optional[str], Query(alias="id")] = None,
):
    if not profile_id:
        raise ValidationError("Profile ID required")
    profile = await service.get_profile(profile_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile
