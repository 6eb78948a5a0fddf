from datetime import UTC, datetime, timedelta

import pytest

from projecthub.backends import Backend, build_sql_backend
from projecthub.config import Settings


class FakeClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        moment = self.current
        self.current = moment + timedelta(seconds=1)
        return moment


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        firebase_config=None,
        firebase_web_api_key=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'projecthub.db'}",
        token_secret="test-secret-key-for-projecthub-tests",
        token_ttl_seconds=600,
        password_hash_rounds=4,
        login_verifies_password=True,
    )


@pytest.fixture
async def backend(test_settings):
    backend = await build_sql_backend(test_settings.database_url, test_settings)
    yield backend
    await backend.close()


@pytest.fixture
def mock_backend() -> Backend:
    return Backend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
