from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

USERS_COLLECTION = "users"

# Fields callers can never overwrite through a profile update.
PROTECTED_USER_FIELDS = frozenset({"uid", "email", "createdAt"})


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserSettings(BaseModel):
    """Per-user preferences stored on the user document."""

    model_config = ConfigDict(extra="allow")

    theme: str = "light"
    notifications: bool = True


class UserRecord(BaseModel):
    """Domain representation of a document in the ``users`` collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    uid: str
    email: str
    name: str
    created_at: str
    last_login: str | None = None
    role: str = UserRole.USER.value
    total_projects: int = Field(default=0, ge=0)
    settings: UserSettings = Field(default_factory=UserSettings)
    projects: list[str] = Field(default_factory=list)
    updated_at: str | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> UserRecord:
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
