import pytest

from projecthub.errors import (
    AuthenticationFailed,
    RegistrationFailed,
    StoreUnavailable,
    UpstreamServiceError,
    UserNotFoundError,
)
from projecthub.services.user_service import UserService


@pytest.fixture
def service(backend, clock):
    return UserService(backend, clock=clock)


@pytest.mark.asyncio
async def test_register_creates_user_document(service, backend):
    outcome = await service.register("ada@example.com", "password1", "Ada")

    assert not outcome.mock_mode
    assert outcome.user.email == "ada@example.com"
    assert outcome.user.name == "Ada"
    assert outcome.token

    stored = await backend.store.get("users", outcome.user.uid)
    assert stored["totalProjects"] == 0
    assert stored["projects"] == []
    assert stored["role"] == "user"
    assert stored["settings"] == {"theme": "light", "notifications": True}
    assert stored["createdAt"] == "2024-05-01T12:00:00.000Z"
    assert "password" not in stored

    claims = await backend.identity.verify_token(outcome.token)
    assert claims["sub"] == outcome.user.uid


@pytest.mark.asyncio
async def test_register_duplicate_email_fails(service):
    await service.register("ada@example.com", "password1", "Ada")

    with pytest.raises(RegistrationFailed, match="already in use"):
        await service.register("ada@example.com", "password1", "Ada again")


@pytest.mark.asyncio
async def test_register_and_login_in_mock_mode(mock_backend, clock):
    service = UserService(mock_backend, clock=clock)

    registered = await service.register("ada@example.com", "password1", "Ada")
    assert registered.mock_mode
    assert registered.user.uid == "user_1714564800000"
    assert registered.token == "mock_token_1714564800000"

    logged_in = await service.login("grace@example.com", "whatever")
    assert logged_in.mock_mode
    assert logged_in.user.name == "grace"
    assert logged_in.token.startswith("mock_token_")


@pytest.mark.asyncio
async def test_login_verifies_password_and_refreshes_last_login(service, backend):
    registered = await service.register("ada@example.com", "password1", "Ada")

    outcome = await service.login("ada@example.com", "password1")

    assert outcome.user.uid == registered.user.uid
    assert outcome.user.name == "Ada"
    stored = await backend.store.get("users", registered.user.uid)
    assert stored["lastLogin"] == "2024-05-01T12:00:01.000Z"


@pytest.mark.asyncio
async def test_login_with_wrong_password_fails(service):
    await service.register("ada@example.com", "password1", "Ada")

    with pytest.raises(AuthenticationFailed, match="Invalid credentials"):
        await service.login("ada@example.com", "password2")


@pytest.mark.asyncio
async def test_legacy_login_issues_token_without_password_check(backend, clock):
    service = UserService(backend, login_verifies_password=False, clock=clock)

    outcome = await service.login("nobody@example.com", "anything")

    assert outcome.user.uid == "user_1714564800000"
    assert outcome.user.name == "nobody"
    claims = await backend.identity.verify_token(outcome.token)
    assert claims["sub"] == outcome.user.uid


@pytest.mark.asyncio
async def test_get_user_missing_raises_not_found(service):
    with pytest.raises(UserNotFoundError):
        await service.get_user("ghost")


@pytest.mark.asyncio
async def test_get_user_requires_store(mock_backend):
    with pytest.raises(StoreUnavailable):
        await UserService(mock_backend).get_user("anyone")


@pytest.mark.asyncio
async def test_update_user_strips_identity_fields_and_merges(service, backend):
    registered = await service.register("ada@example.com", "password1", "Ada")
    uid = registered.user.uid

    document = await service.update_user(
        uid,
        {
            "uid": "hijacked",
            "email": "evil@example.com",
            "createdAt": "1970-01-01T00:00:00.000Z",
            "name": "Ada Lovelace",
            "settings": {"theme": "dark", "notifications": False},
        },
    )

    assert document["uid"] == uid
    assert document["email"] == "ada@example.com"
    assert document["createdAt"] == "2024-05-01T12:00:00.000Z"
    assert document["name"] == "Ada Lovelace"
    assert document["settings"] == {"theme": "dark", "notifications": False}
    assert document["totalProjects"] == 0
    assert document["updatedAt"] == "2024-05-01T12:00:01.000Z"
    assert await backend.store.get("users", "hijacked") is None


@pytest.mark.asyncio
async def test_update_unknown_user_surfaces_store_failure(service):
    with pytest.raises(UpstreamServiceError, match="Failed to update profile"):
        await service.update_user("ghost", {"name": "Boo"})


@pytest.mark.asyncio
async def test_verify_token_resolves_user(service):
    registered = await service.register("ada@example.com", "password1", "Ada")

    user = await service.verify_token(registered.token)

    assert user.uid == registered.user.uid
    assert user.total_projects == 0


@pytest.mark.asyncio
async def test_verify_token_failures(service, backend):
    with pytest.raises(AuthenticationFailed, match="No token provided"):
        await service.verify_token("")
    with pytest.raises(AuthenticationFailed, match="No token provided"):
        await service.verify_token(123)
    with pytest.raises(AuthenticationFailed, match="Invalid or expired token"):
        await service.verify_token("garbage")

    orphan_token = await backend.identity.create_token("no-such-user")
    with pytest.raises(UserNotFoundError):
        await service.verify_token(orphan_token)


@pytest.mark.asyncio
async def test_list_users(service):
    await service.register("ada@example.com", "password1", "Ada")
    await service.register("grace@example.com", "password1", "Grace")

    users = await service.list_users()

    assert sorted(user.email for user in users) == ["ada@example.com", "grace@example.com"]
