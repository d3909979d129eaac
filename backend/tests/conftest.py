"""
Foods API Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure service tests
    ├── temp_storage: Temporary upload directory
    ├── sample_image_bytes: Minimal JPEG bytes for upload tests
    ├── test_settings: Settings pointing at temp_storage, 1000-byte upload cap
    ├── db_engine / db_session: In-memory aiosqlite database with the foods table
    ├── seeded_foods: Twelve foods, Apple … Lasagna
    └── test_client: HTTPX AsyncClient wired to the app with the test
                     database and a FoodService built from test_settings
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import AsyncGenerator, List
from unittest.mock import AsyncMock, MagicMock

# Environment must be in place before any `app` import reads the settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="foods_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base, get_db_session
from app.models.food import Food, slugify
from app.services.file_service import FileService
from app.services.food_service import FoodService, get_food_service

# (name, category, calories, price)
SEED_FOODS = [
    ("Apple", "fruit", 95, 0.5),
    ("Banana", "fruit", 105, 0.25),
    ("Carrot", "vegetable", 25, 0.3),
    ("Donut", "dessert", 250, 1.5),
    ("Eggplant", "vegetable", 35, 1.2),
    ("Fig", "fruit", 37, 0.8),
    ("Granola", "breakfast", 471, 4.0),
    ("Hummus", "spread", 166, 3.5),
    ("Ice Cream", "dessert", 207, 2.75),
    ("Jam", "spread", 56, 3.0),
    ("Kale", "vegetable", 33, 2.0),
    ("Lasagna", "main", 336, 8.5),
]


# ══════════════════════════════════════════════════════════════════════════
# Mocks & Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        async def test_get_food(mock_db_session):
            result = MagicMock()
            result.scalar_one_or_none.return_value = food
            mock_db_session.execute.return_value = result
            envelope = await service.get_food(mock_db_session, food.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def test_settings(temp_storage):
    return Settings(file_upload_path=temp_storage, max_file_size=1000)


@pytest.fixture
def food_service(test_settings, temp_storage):
    return FoodService(test_settings, FileService(test_settings, upload_path=temp_storage))


def make_food(name: str, category=None, calories=None, price=None) -> Food:
    return Food(
        name=name,
        slug=slugify(name),
        category=category,
        calories=calories,
        price=price,
        created_at=datetime.now(timezone.utc),
    )


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared through a single connection (StaticPool), so
    every session in a test sees the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_foods(session_factory) -> List[Food]:
    foods = [make_food(*row) for row in SEED_FOODS]
    async with session_factory() as session:
        session.add_all(foods)
        await session.commit()
    return foods


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, food_service):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_list(test_client, seeded_foods):
            response = await test_client.get("/api/v1/foods")
            assert response.status_code == 200
    """
    from app.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_food_service] = lambda: food_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
