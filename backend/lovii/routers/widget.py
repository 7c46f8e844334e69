"""Widget relay endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from lovii.dependencies import WidgetServiceDep
from lovii.errors import ValidationError
from lovii.models import WidgetSendRequest, WidgetSendResult, WidgetStatus

router = APIRouter()


@router.post("", response_model=WidgetSendResult)
async def send_to_widget(body: WidgetSendRequest, service: WidgetServiceDep):
    return await service.send(body.my_id, body.note)


@router.get("", response_model=WidgetStatus)
async def widget_status(
    service: WidgetServiceDep,
    my_id: Annotated[Optional[str], Query(alias="myId")] = None,
):
    if not my_id:
        raise ValidationError("myId required")
    return await service.status(my_id)
