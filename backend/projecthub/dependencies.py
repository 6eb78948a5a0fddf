from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from projecthub.backends import Backend
from projecthub.config import Settings, get_settings
from projecthub.services.project_service import ProjectService
from projecthub.services.user_service import UserService


def get_app_settings(connection: HTTPConnection) -> Settings:
    return getattr(connection.app.state, "settings", None) or get_settings()


def get_backend(connection: HTTPConnection) -> Backend:
    return connection.app.state.backend


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
BackendDep = Annotated[Backend, Depends(get_backend)]


def get_user_service(backend: BackendDep, app_settings: SettingsDep) -> UserService:
    return UserService(
        backend,
        login_verifies_password=app_settings.login_verifies_password,
    )


def get_project_service(backend: BackendDep) -> ProjectService:
    return ProjectService(backend)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
