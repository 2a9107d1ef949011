"""
Memory Map Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession (service unit tests)
    ├── sample_message_data: Column values for a stored message
    ├── db_engine: Fresh SQLite database with the schema created
    ├── app: FastAPI app whose sessions come from db_engine
    ├── test_client: HTTPX AsyncClient bound to `app`
    └── fixed_device / denied_device: DeviceGeolocator fakes
"""

import os
import tempfile

# Settings are read when memorymap.config is first imported; set the
# environment before any memorymap import below.
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="memorymap_test_"), "test.db")
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "1000"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from memorymap.database import Base, get_db_session
from memorymap.mapview.location import DeviceGeolocator, GeolocationUnavailable
from memorymap.models.message import Message  # noqa: F401  (registers the table)


class FixedDevice(DeviceGeolocator):
    """Device that always reports the same position."""

    def __init__(self, latitude: float, longitude: float):
        self.position = (latitude, longitude)
        self.calls = 0

    async def current_position(self):
        self.calls += 1
        return self.position


class DeniedDevice(DeviceGeolocator):
    """Device whose user refused the geolocation prompt."""

    async def current_position(self):
        raise GeolocationUnavailable("User denied Geolocation")


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_list(mock_db_session):
            mock_db_session.execute.return_value.scalars.return_value.all.return_value = []
            result = await message_service.list_messages(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_message_data():
    return {
        "id": uuid4(),
        "name": "Alex",
        "message": "Hello2024",
        "latitude": 43.1,
        "longitude": -77.6,
        "created_at": datetime.now(timezone.utc),
    }


@pytest.fixture
def valid_submission():
    return {"name": "Alex", "message": "Hello2024", "latitude": 43.1, "longitude": -77.6}


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database per test, with the messages table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'messages.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def app(db_engine):
    """A new application instance whose request sessions use db_engine."""
    from memorymap.main import create_app

    application = create_app()
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def fixed_device():
    return FixedDevice(40.7128, -74.0060)


@pytest.fixture
def denied_device():
    return DeniedDevice()
