"""
Dependency injection for FastAPI routes.

Each alias pulls a service off ``app.state``, where the lifespan placed it.
"""

from typing import Annotated
from fastapi import Request, Depends

from lovii.services.auth import AuthService
from lovii.services.notes import NoteService
from lovii.services.profile import ProfileService
from lovii.services.tasks import TaskService
from lovii.services.widget import WidgetService


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def get_widget_service(request: Request) -> WidgetService:
    return request.app.state.widget_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
WidgetServiceDep = Annotated[WidgetService, Depends(get_widget_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
