"""
TravelTales Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite database file and uploads directory
       under pytest's tmp_path, so tests never share state.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:  Settings pointing at tmp_path
    ├── database:       Database with the schema created
    ├── file_store:     FileStore on the temp uploads directory
    ├── story_service:  StoryService wired to the two above
    ├── app:            Full FastAPI app built by create_app(test_settings)
    ├── test_client:    HTTPX AsyncClient talking to `app` via ASGITransport
    ├── auth_headers / other_auth_headers: bearer tokens for two users
    └── story_payload:  A valid add-story body
"""

import os
import tempfile

# Override settings for testing BEFORE any traveltales imports: importing
# traveltales.main builds a default app from the environment
TEST_JWT_SECRET = "test-secret-not-real"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="traveltales_db_"), "default.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="traveltales_uploads_")
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from traveltales.config import Settings
from traveltales.database import Database
from traveltales.main import create_app
from traveltales.repositories.story_repository import StoryRepository
from traveltales.services.file_store import FileStore
from traveltales.services.story_service import StoryService

# base_url of the test client; generated URLs use this origin
ORIGIN = "http://test"

USER_A = "user-a"
USER_B = "user-b"

# 2023-06-05T21:20:00Z
VISITED_MS = 1_686_000_000_000


def make_token(user_id: str, secret: str = TEST_JWT_SECRET) -> str:
    """Sign an access token the way the auth service does (`id` claim)."""
    return jwt.encode({"id": user_id}, secret, algorithm="HS256")


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=str(tmp_path / "uploads"),
        jwt_secret=TEST_JWT_SECRET,
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database.from_settings(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def file_store(test_settings):
    return FileStore(test_settings.storage_root, test_settings.max_file_size)


@pytest.fixture
def story_service(database, file_store):
    return StoryService(StoryRepository(database), file_store)


@pytest_asyncio.fixture
async def app(test_settings):
    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the ASGI app (no server, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=ORIGIN) as client:
        yield client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(USER_A)}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {make_token(USER_B)}"}


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def story_payload():
    return {
        "title": "Gondolas at dusk",
        "story": "We took the last vaporetto down the Grand Canal.",
        "visitedLocation": "Venice, Italy",
        "imageUrl": f"{ORIGIN}/uploads/gondolas.jpg",
        "visitedDate": VISITED_MS,
    }
