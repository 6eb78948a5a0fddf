from __future__ import annotations

from fastapi import APIRouter

from projecthub.dependencies import ProjectServiceDep
from projecthub.models.api import ProjectCreateRequest, ProjectResponse

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse)
async def create_project(
    payload: ProjectCreateRequest,
    service: ProjectServiceDep,
) -> ProjectResponse:
    project = await service.create_project(
        user_id=payload.user_id,
        name=payload.name,
        project_type=payload.type,
        description=payload.description,
    )
    return ProjectResponse(project=project)
