from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from projecthub.errors import StoreUnavailable, UpstreamServiceError, UserNotFoundError
from projecthub.models.project import ProjectStatus
from projecthub.models.user import UserRecord
from projecthub.repositories.user_repository import UserRepository
from projecthub.services.project_service import ProjectService
from projecthub.store import DocumentStoreError


@pytest.fixture
async def owner(backend):
    user = UserRecord(
        uid="user1",
        email="ada@example.com",
        name="Ada",
        created_at="2024-01-01T00:00:00.000Z",
        last_login="2024-01-01T00:00:00.000Z",
    )
    return await UserRepository(backend.store).create_user(user)


@pytest.mark.asyncio
async def test_create_project(backend, clock, owner):
    service = ProjectService(backend, clock=clock)

    project = await service.create_project("user1", "Website", "web", "Landing page")

    assert project.id == "project_1714564800000000"
    assert project.user_id == "user1"
    assert project.description == "Landing page"
    assert project.status == ProjectStatus.ACTIVE
    assert project.collaborators == []
    assert project.tasks == []

    stored_project = await backend.store.get("projects", project.id)
    assert stored_project["userId"] == "user1"
    assert stored_project["createdAt"] == stored_project["updatedAt"]

    stored_user = await backend.store.get("users", "user1")
    assert stored_user["totalProjects"] == 1
    assert stored_user["projects"] == [project.id]


@pytest.mark.asyncio
async def test_description_defaults_to_empty(backend, clock, owner):
    project = await ProjectService(backend, clock=clock).create_project("user1", "App", "mobile")

    assert project.description == ""


@pytest.mark.asyncio
async def test_create_project_for_unknown_user(backend, clock):
    service = ProjectService(backend, clock=clock)

    with pytest.raises(UserNotFoundError):
        await service.create_project("ghost", "Website", "web")

    assert await backend.store.list("projects") == []


@pytest.mark.asyncio
async def test_counter_tracks_project_list(backend, clock, owner):
    service = ProjectService(backend, clock=clock)

    for index in range(3):
        await service.create_project("user1", f"Project {index}", "web")

    stored_user = await backend.store.get("users", "user1")
    assert stored_user["totalProjects"] == 3
    assert len(stored_user["projects"]) == 3


@pytest.mark.asyncio
async def test_list_user_projects_newest_first(backend, clock, owner):
    service = ProjectService(backend, clock=clock)
    await UserRepository(backend.store).create_user(
        UserRecord(uid="user2", email="grace@example.com", name="Grace", created_at="2024-01-01T00:00:00.000Z")
    )

    first = await service.create_project("user1", "First", "web")
    await service.create_project("user2", "Other", "web")
    second = await service.create_project("user1", "Second", "web")

    projects = await service.list_user_projects("user1")

    assert [project.id for project in projects] == [second.id, first.id]
    assert all(project.user_id == "user1" for project in projects)


@pytest.mark.asyncio
async def test_list_projects_for_unknown_user_is_empty(backend):
    assert await ProjectService(backend).list_user_projects("ghost") == []


@pytest.mark.asyncio
async def test_store_failure_during_commit(backend, clock, owner, monkeypatch):
    monkeypatch.setattr(
        backend.store, "commit", AsyncMock(side_effect=DocumentStoreError("deadline exceeded"))
    )

    with pytest.raises(UpstreamServiceError, match="Failed to create project: deadline exceeded"):
        await ProjectService(backend, clock=clock).create_project("user1", "Website", "web")


@pytest.mark.asyncio
async def test_create_project_requires_store(mock_backend):
    with pytest.raises(StoreUnavailable):
        await ProjectService(mock_backend).create_project("user1", "Website", "web")


@pytest.mark.asyncio
async def test_same_instant_projects_get_distinct_ids(backend, owner):
    frozen = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
    service = ProjectService(backend, clock=lambda: frozen)

    first = await service.create_project("user1", "First", "web")
    second = await service.create_project("user1", "Second", "web")

    assert first.id == "project_1714564800000000"
    assert second.id == "project_1714564800000000_1"
    stored_user = await backend.store.get("users", "user1")
    assert stored_user["totalProjects"] == 2
    assert stored_user["projects"] == [first.id, second.id]
    assert len(await service.list_user_projects("user1")) == 2
