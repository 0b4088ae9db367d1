"""
Pytest configuration and fixtures for Studio Client Portal tests.

Provides common fixtures for:
- Test database setup (in-memory SQLite)
- HTTP client bound to the app with the database override
- Producer credentials (bearer token, PIN hash, allow-list)
- Common shoot data
"""

import os

# Must be set before portal.core.config is imported anywhere
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-0123456789")
os.environ.setdefault("CORS_ORIGINS", '["https://portal.example.com", "http://localhost:5173"]')

from collections.abc import AsyncGenerator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from portal.core.config import settings  # noqa: E402
from portal.core.pin_security import hash_pin  # noqa: E402
from portal.core.rate_limit import limiter, producer_limiter  # noqa: E402
from portal.core.security import create_access_token  # noqa: E402
from portal.core.storage import client_state_store  # noqa: E402
from portal.db.session import Base, get_db  # noqa: E402
from portal.main import app  # noqa: E402

TEST_PIN = "4821"
PRODUCER_EMAIL = "producer@studio.example.com"
OTHER_EMAIL = "intruder@example.com"

# =============================================================================
# Database Fixtures
# =============================================================================


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE on share links needs this on SQLite
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def override_get_db(db_session):
    """Override the get_db dependency for tests."""

    async def _override():
        yield db_session

    return _override


# =============================================================================
# Global State Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def pin_hash() -> str:
    """bcrypt hash of TEST_PIN, computed once per session."""
    return hash_pin(TEST_PIN)


@pytest.fixture(autouse=True)
def portal_settings(monkeypatch, pin_hash):
    """Known PIN, allow-list and share link limits for every test."""
    monkeypatch.setattr(settings, "ADMIN_PIN_HASH", pin_hash)
    monkeypatch.setattr(settings, "ADMIN_EMAIL_ALLOWLIST", f"{PRODUCER_EMAIL}, Assistant@Studio.example.com")
    monkeypatch.setattr(settings, "ALLOW_LEGACY_PIN_HASH", False)
    monkeypatch.setattr(settings, "SHARE_LINK_DEFAULT_TTL_HOURS", 336)
    monkeypatch.setattr(settings, "SHARE_LINK_MAX_TTL_HOURS", 720)
    yield settings


@pytest.fixture(autouse=True)
def reset_client_state():
    """PIN attempt records and sessions must not leak between tests."""
    client_state_store.clear()
    yield
    client_state_store.clear()


@pytest.fixture(autouse=True)
def disable_rate_limits():
    """IP rate limits are exercised separately; PIN lockout tests send more than 5/minute."""
    limiter.enabled = False
    producer_limiter.enabled = False
    yield
    limiter.enabled = True
    producer_limiter.enabled = True


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def client(override_get_db) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the app with the database override.

    Cookies persist across requests, like a single browser.
    """
    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# Producer Authentication Fixtures
# =============================================================================


@pytest.fixture
def producer_token() -> str:
    return create_access_token(subject=PRODUCER_EMAIL)


@pytest.fixture
def producer_headers(producer_token) -> dict:
    return {"Authorization": f"Bearer {producer_token}"}


@pytest.fixture
def outsider_headers() -> dict:
    """Valid JWT for an e-mail that is not allow-listed."""
    return {"Authorization": f"Bearer {create_access_token(subject=OTHER_EMAIL)}"}


# =============================================================================
# Shoot Fixtures
# =============================================================================


@pytest.fixture
def shoot_payload() -> dict:
    """A realistic create payload."""
    return {
        "id": "spring-lookbook-2026",
        "title": "Spring Lookbook",
        "client": "Maison Verte",
        "client_email": "hello@maisonverte.fr",
        "date": "2026-04-12",
        "project_type": "photo_shoot",
        "status": "in_progress",
        "location_name": "Studio North",
        "location_address": "12 Harbour Road",
        "moodboard_url": "https://boards.example.com/spring",
        "team": [
            {"role": "Photographer", "name": "Ana Ruiz", "email": "ana@studionorth.es", "phone": "+34 600 123 456"},
        ],
        "talent": [
            {"name": "Lea Moreau", "role": "Model", "sizes": {"height": "178", "shoes": "39"}},
        ],
        "timeline": [
            {"time": "09:00", "activity": "Call time"},
            {"time": "10:30", "activity": "First look"},
        ],
        "documents": [
            {"name": "Contract", "type": "client_contract", "url": "https://docs.example.com/contract.pdf"},
        ],
    }


@pytest_asyncio.fixture
async def created_shoot(client, producer_headers, shoot_payload) -> dict:
    """Create a shoot through the API and return the admin representation."""
    response = await client.post("/api/v1/shoots", json=shoot_payload, headers=producer_headers)
    assert response.status_code == 201, response.text
    return response.json()
