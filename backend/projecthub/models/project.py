from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PROJECTS_COLLECTION = "projects"


class ProjectStatus(str, Enum):
    """Lifecycle states for a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"


class ProjectRecord(BaseModel):
    """Domain representation of a document in the ``projects`` collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    user_id: str
    name: str
    type: str
    description: str = ""
    created_at: str
    updated_at: str
    status: ProjectStatus = ProjectStatus.ACTIVE
    # Reserved for collaboration and task tracking; always empty at creation.
    collaborators: list[Any] = Field(default_factory=list)
    tasks: list[Any] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> ProjectRecord:
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
