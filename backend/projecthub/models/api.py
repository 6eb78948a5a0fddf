from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .project import ProjectRecord
from .user import UserRecord, UserSettings


class ApiModel(BaseModel):
    """Base for wire schemas: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(ApiModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class VerifyTokenRequest(ApiModel):
    # Left untyped: a missing or non-string token is an authentication failure
    token: Any = None


class UserUpdateRequest(ApiModel):
    """Partial profile update.

    Known user fields are type-checked so the stored document stays readable;
    any other field is stored as given.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str | None = Field(default=None, min_length=1)
    role: str | None = None
    last_login: str | None = None
    total_projects: int | None = Field(default=None, ge=0)
    settings: UserSettings | None = None
    projects: list[str] | None = None

    @field_validator("name", "role", "total_projects", "settings", "projects")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Defaults are not validated, so only an explicit null gets here
        if value is None:
            raise ValueError("must not be null")
        return value

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ProjectCreateRequest(ApiModel):
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    description: str | None = None


class UserSummary(ApiModel):
    """Subset returned by registration and login."""

    uid: str
    email: str
    name: str
    created_at: str

    @classmethod
    def from_record(cls, user: UserRecord) -> UserSummary:
        return cls(uid=user.uid, email=user.email, name=user.name, created_at=user.created_at)


class UserListItem(UserSummary):
    total_projects: int = 0

    @classmethod
    def from_record(cls, user: UserRecord) -> UserListItem:
        return cls(
            uid=user.uid,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            total_projects=user.total_projects,
        )


class VerifiedUser(UserListItem):
    last_login: str | None = None
    role: str

    @classmethod
    def from_record(cls, user: UserRecord) -> VerifiedUser:
        return cls(
            uid=user.uid,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            last_login=user.last_login,
            role=user.role,
            total_projects=user.total_projects,
        )


class UserPublic(VerifiedUser):
    """Fields of a user record safe to return to any caller."""

    settings: UserSettings

    @classmethod
    def from_record(cls, user: UserRecord) -> UserPublic:
        return cls(
            uid=user.uid,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            last_login=user.last_login,
            role=user.role,
            total_projects=user.total_projects,
            settings=user.settings,
        )


class AuthResponse(ApiModel):
    success: bool = True
    user: UserSummary
    token: str
    message: str


class UserResponse(ApiModel):
    success: bool = True
    user: UserPublic


class VerifyTokenResponse(ApiModel):
    success: bool = True
    user: VerifiedUser


class UserListResponse(ApiModel):
    success: bool = True
    users: list[UserListItem] = Field(default_factory=list)
    count: int = 0


class UserUpdateResponse(ApiModel):
    success: bool = True
    user: dict[str, Any]
    message: str = "Profile updated successfully"


class ProjectResponse(ApiModel):
    success: bool = True
    project: ProjectRecord
    message: str = "Project created successfully!"


class ProjectListResponse(ApiModel):
    success: bool = True
    projects: list[ProjectRecord] = Field(default_factory=list)
    count: int = 0


class HealthResponse(ApiModel):
    status: Literal["online"] = "online"
    message: str
    timestamp: str
    store_available: bool
    store_status: Literal["initialized", "disabled"]
    store_backend: str
    endpoints: list[str] = Field(default_factory=list)


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
