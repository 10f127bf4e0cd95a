"""Pytest configuration and fixtures."""

import os
import tempfile

# Keep the app's import-time settings away from the working directory
_TEST_ROOT = tempfile.mkdtemp(prefix="contest-tests-")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATA_DIR", os.path.join(_TEST_ROOT, "data"))
os.environ.setdefault("UPLOADS_DIR", os.path.join(_TEST_ROOT, "uploads"))
os.environ.setdefault("SEED_DEMO_USER", "false")

from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport

from backend.app.core.security import BcryptPasswordHasher, TokenService
from backend.app.db.base import ContestDatabase
from backend.app.db.store import InMemoryStore
from backend.app.main import app
from backend.app.services.contest import ContestService, get_contest_service
from backend.app.services.media import MediaStore

TEST_DOMAIN = "corp.test"
TEST_SECRET = "test-secret-key"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory collection store."""
    return InMemoryStore()


@pytest.fixture
def db(store) -> ContestDatabase:
    """Contest database over the in-memory store."""
    database = ContestDatabase(store)
    database.load()
    return database


@pytest.fixture
def media(tmp_path) -> MediaStore:
    """Media store writing into a temporary uploads directory."""
    return MediaStore(
        uploads_dir=tmp_path / "uploads",
        max_size=1024,
        allowed_extensions=["jpeg", "jpg", "png", "gif", "webp"],
    )


@pytest.fixture
def service(db, media) -> ContestService:
    """
    Contest service wired to test collaborators.

    Uses the cheapest bcrypt cost factor and a fixed signing key.
    """
    return ContestService(
        db,
        media,
        hasher=BcryptPasswordHasher(rounds=4),
        tokens=TokenService(secret_key=TEST_SECRET, algorithm="HS256", expiration_hours=1),
        allowed_email_domain=TEST_DOMAIN,
    )


@pytest.fixture
async def alice(service):
    """Registered user alice@corp.test."""
    return await service.register("alice", "alice@corp.test", "secret123")


@pytest.fixture
async def bob(service):
    """Registered user bob@corp.test."""
    return await service.register("bob", "bob@corp.test", "secret123")


@pytest.fixture(scope="function")
async def test_client(service) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client backed by the test contest service.

    Overrides the app's contest service dependency so each test gets an
    empty in-memory database.
    """
    app.dependency_overrides[get_contest_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Cleanup
    app.dependency_overrides.clear()


async def register_user(client: AsyncClient, username: str) -> dict:
    """Register ``<username>@corp.test`` and return the auth response with a headers helper."""
    response = await client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@{TEST_DOMAIN}", "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


@pytest.fixture
def register():
    """Expose ``register_user`` to tests without importing conftest."""
    return register_user
