from __future__ import annotations

import logging

from projecthub.backends import Backend
from projecthub.clock import Clock, epoch_micros, isoformat, utcnow
from projecthub.errors import StoreUnavailable, UpstreamServiceError, UserNotFoundError
from projecthub.models.project import ProjectRecord, ProjectStatus
from projecthub.repositories.project_repository import ProjectRepository
from projecthub.repositories.user_repository import UserRepository
from projecthub.store import DocumentAlreadyExistsError, DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 5


class ProjectService:
    """Creates projects and keeps the owner's project counter in step."""

    def __init__(self, backend: Backend, *, clock: Clock = utcnow):
        self.backend = backend
        self.clock = clock

    def _store(self) -> DocumentStore:
        if self.backend.store is None:
            raise StoreUnavailable()
        return self.backend.store

    async def create_project(
        self,
        user_id: str,
        name: str,
        project_type: str,
        description: str | None = None,
    ) -> ProjectRecord:
        logger.info("Creating project for user: %s", user_id)
        store = self._store()
        users = UserRepository(store)
        projects = ProjectRepository(store)

        try:
            owner = await users.get_document(user_id)
        except DocumentStoreError as exc:
            logger.error("Create project error: %s", exc)
            raise UpstreamServiceError(f"Failed to create project: {exc}") from exc
        if owner is None:
            raise UserNotFoundError(user_id)

        now = self.clock()
        timestamp = isoformat(now)
        project = ProjectRecord(
            id=f"project_{epoch_micros(now)}",
            user_id=user_id,
            name=name,
            type=project_type,
            description=description or "",
            created_at=timestamp,
            updated_at=timestamp,
            status=ProjectStatus.ACTIVE,
            collaborators=[],
            tasks=[],
        )

        base_id = project.id
        for attempt in range(1, _MAX_ID_ATTEMPTS + 1):
            try:
                await projects.create_project(project)
                break
            except DocumentAlreadyExistsError as exc:
                if attempt == _MAX_ID_ATTEMPTS:
                    logger.error("Create project error: %s", exc)
                    raise UpstreamServiceError(f"Failed to create project: {exc}") from exc
                logger.warning("Project id %s already taken, retrying", project.id)
                project = project.model_copy(update={"id": f"{base_id}_{attempt}"})
            except DocumentStoreError as exc:
                logger.error("Create project error: %s", exc)
                raise UpstreamServiceError(f"Failed to create project: {exc}") from exc

        logger.info("Project %s created for user %s", project.id, user_id)
        return project

    async def list_user_projects(self, user_id: str) -> list[ProjectRecord]:
        logger.info("Fetching projects for user: %s", user_id)
        projects = ProjectRepository(self._store())
        try:
            return await projects.list_user_projects(user_id)
        except DocumentStoreError as exc:
            logger.error("Get projects error: %s", exc)
            raise UpstreamServiceError(f"Failed to fetch projects: {exc}") from exc
