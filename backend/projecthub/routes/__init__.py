from __future__ import annotations

from fastapi import APIRouter

from projecthub.models.api import ErrorResponse

from . import auth, health, projects, users

api_router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(projects.router)

health_router = health.router

__all__ = ["api_router", "health_router"]
