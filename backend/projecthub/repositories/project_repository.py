from __future__ import annotations

from projecthub.models.project import PROJECTS_COLLECTION, ProjectRecord
from projecthub.models.user import USERS_COLLECTION
from projecthub.store import ArrayUnion, DocumentStore, Increment, WriteBatch


class ProjectRepository:
    """Repository for documents in the ``projects`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_project(self, project: ProjectRecord) -> ProjectRecord:
        """Store ``project`` and register it on its owner in one atomic batch.

        Raises :class:`DocumentAlreadyExistsError` if the project id is taken;
        nothing is written in that case.
        """
        batch = (
            WriteBatch()
            .create(PROJECTS_COLLECTION, project.id, project.to_document())
            .update(
                USERS_COLLECTION,
                project.user_id,
                {
                    "totalProjects": Increment(1),
                    "projects": ArrayUnion(project.id),
                },
            )
        )
        await self.store.commit(batch)
        return project

    async def list_user_projects(self, user_id: str) -> list[ProjectRecord]:
        documents = await self.store.query(
            PROJECTS_COLLECTION,
            "userId",
            user_id,
            order_by="createdAt",
            descending=True,
        )
        return [ProjectRecord.from_document(document) for document in documents]
