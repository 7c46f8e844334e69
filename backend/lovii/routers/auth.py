"""Registration and login endpoints."""

from fastapi import APIRouter

from lovii.dependencies import AuthServiceDep
from lovii.models import AuthResult, LoginRequest, RegisterRequest

router = APIRouter()


@router.post("/register", response_model=AuthResult, status_code=201)
async def register(body: RegisterRequest, service: AuthServiceDep):
    return await service.register(body.name, body.password)


@router.post("/login", response_model=AuthResult)
async def login(body: LoginRequest, service: AuthServiceDep):
    return await service.login(body.code, body.password)
