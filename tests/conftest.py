"""
Pytest configuration and fixtures for testing
"""
from datetime import datetime, timezone

import httpx
import pytest

from auth_utils import create_jwt
from config import Settings
from crud.documents import DocumentStore
from crud.user import UserRepository
from database import create_engine_from_settings, create_session_factory, drop_db, init_db
from main import create_app

TEST_SECRET = "test-secret-key-for-unit-tests"

# Fixed clock used by unit tests
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at an isolated SQLite file per test."""
    return Settings(
        JWT_SECRET_KEY=TEST_SECRET,
        TOKEN_TTL_DAYS=7,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test_users.db'}",
        ENV="test",
        RENDER=None,
    )


@pytest.fixture
async def test_engine(test_settings):
    """
    Engine with all tables created before the test and dropped after it.
    NullPool gives every store operation its own connection.
    """
    engine = create_engine_from_settings(test_settings, null_pool=True)
    await init_db(engine)
    yield engine
    await drop_db(engine)
    await engine.dispose()


@pytest.fixture
def document_store(test_engine):
    return DocumentStore(create_session_factory(test_engine))


@pytest.fixture
def user_repo(document_store):
    return UserRepository(document_store)


@pytest.fixture
async def async_client(test_settings, document_store):
    """Async HTTP client bound to an app wired to the test store."""
    app = create_app(settings=test_settings, document_store=document_store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Factory for Authorization headers carrying a freshly issued token."""
    def _headers(uid: str = "u1", email: str = "a@x.com") -> dict:
        token = create_jwt(uid, email, TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}
    return _headers
