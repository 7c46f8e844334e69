"""Task routes. POST takes one task, or an array that replaces the whole list."""

from typing import Annotated, Optional, Union

from fastapi import APIRouter, Body, Query

from lovii.dependencies import TaskServiceDep
from lovii.errors import ValidationError
from lovii.models import BulkReplaceResult, Task, TaskCreate

router = APIRouter()


@router.get("", response_model=list[Task])
async def list_tasks(
    service: TaskServiceDep,
    profile_id: Annotated[Optional[str], Query(alias="profileId")] = None,
):
    if not profile_id:
        raise ValidationError("Profile ID required")
    return await service.list_tasks(profile_id)


@router.post("", response_model=Union[Task, BulkReplaceResult])
async def save_tasks(
    service: TaskServiceDep,
    body: Annotated[Union[list[TaskCreate], TaskCreate], Body()],
    profile_id: Annotated[Optional[str], Query(alias="profileId")] = None,
):
    if isinstance(body, list):
        count = await service.replace_tasks(profile_id, body)
        return BulkReplaceResult(success=True, count=count)
    if profile_id and not body.profile_id:
        body.profile_id = profile_id
    return await service.create_task(body)
