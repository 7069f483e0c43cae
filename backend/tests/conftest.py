"""Shared test configuration and fixtures.

Every test gets its own in-memory SQLite database (foreign keys enabled), so
repositories can commit freely without leaking rows between tests.
"""

import os
from collections.abc import AsyncGenerator

# Keep the application engine off the production database driver.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.villa import Villa  # noqa: E402
from app.models.villa_number import VillaNumber  # noqa: E402
from app.repository.villa import VillaRepository  # noqa: E402
from app.repository.villa_number import VillaNumberRepository  # noqa: E402

# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test database, one session per request."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Repositories and seeded entities
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def villa_repo(db_session: AsyncSession) -> VillaRepository:
    return VillaRepository(db_session)


@pytest_asyncio.fixture
async def villa_number_repo(db_session: AsyncSession) -> VillaNumberRepository:
    return VillaNumberRepository(db_session)


@pytest_asyncio.fixture
async def test_villa(villa_repo: VillaRepository) -> Villa:
    """A villa persisted directly through the repository."""
    return await villa_repo.create(
        Villa(
            name="Royal Villa",
            details="Ocean-facing villa with a private garden.",
            rate=200.0,
            sqft=550,
            occupancy=4,
            image_url="https://example.com/villa1.jpg",
            amenity="pool",
        )
    )


@pytest_asyncio.fixture
async def test_villa_number(villa_number_repo: VillaNumberRepository, test_villa: Villa) -> VillaNumber:
    return await villa_number_repo.create(
        VillaNumber(villa_no=101, villa_id=test_villa.id, special_details="Sea view")
    )


@pytest_asyncio.fixture
async def api_villa(client: AsyncClient) -> dict:
    """Create and return a villa via the API."""
    response = await client.post(
        "/api/v1/villas",
        json={
            "name": "Pool View",
            "details": "Villa with an infinity pool.",
            "rate": 150.0,
            "sqft": 400,
            "occupancy": 3,
            "amenity": "pool",
        },
    )
    assert response.status_code == 201, f"Failed to create test villa: {response.text}"
    return response.json()["result"]
