"""Partner linking endpoint."""

from fastapi import APIRouter

from lovii.dependencies import ProfileServiceDep
from lovii.models import ConnectRequest, ConnectResult

router = APIRouter()


@router.post("", response_model=ConnectResult)
async def connect_partner(body: ConnectRequest, service: ProfileServiceDep):
    return await service.connect(body.my_id, body.partner_code)
