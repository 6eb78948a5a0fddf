from __future__ import annotations

from fastapi import APIRouter

from projecthub.dependencies import ProjectServiceDep, UserServiceDep
from projecthub.models.api import (
    ProjectListResponse,
    UserListItem,
    UserListResponse,
    UserPublic,
    UserResponse,
    UserUpdateRequest,
    UserUpdateResponse,
)

router = APIRouter(tags=["users"])


@router.get("/users", response_model=UserListResponse)
async def list_users(service: UserServiceDep) -> UserListResponse:
    """List every user (admin view, unpaginated)."""
    users = await service.list_users()
    items = [UserListItem.from_record(user) for user in users]
    return UserListResponse(users=items, count=len(items))


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserServiceDep) -> UserResponse:
    user = await service.get_user(user_id)
    return UserResponse(user=UserPublic.from_record(user))


@router.put("/user/{user_id}", response_model=UserUpdateResponse)
async def update_user(
    user_id: str,
    service: UserServiceDep,
    payload: UserUpdateRequest,
) -> UserUpdateResponse:
    document = await service.update_user(user_id, payload.to_fields())
    return UserUpdateResponse(user=document)


@router.get("/user/{user_id}/projects", response_model=ProjectListResponse)
async def list_user_projects(user_id: str, service: ProjectServiceDep) -> ProjectListResponse:
    projects = await service.list_user_projects(user_id)
    return ProjectListResponse(projects=projects, count=len(projects))
