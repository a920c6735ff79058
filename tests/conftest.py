"""
Shared fixtures: a throwaway SQLite database per test (aiosqlite) and an
in-process fake Redis, wired into the FastAPI app via dependency_overrides.
"""
import os

# Must be set before ridematch.config is first imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("IDENTITY_SERVICE_KEY", "test-identity-key")

from datetime import date, time
from decimal import Decimal

import fakeredis
import pytest
import pytest_asyncio
from fakeredis import aioredis as fake_aioredis
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ridematch.database import Base, get_db
from ridematch.main import app
from ridematch.middleware.auth import create_access_token
from ridematch.models import Booking, Driver
from ridematch.redis_client import get_redis
from ridematch.schemas.schemas import BookingCreateRequest


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def redis():
    r = fake_aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield r
    await r.aclose()


@pytest_asyncio.fixture
async def client(session_factory, redis):
    async def _get_db():
        async with session_factory() as session:
            yield session

    async def _get_redis():
        return redis

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis] = _get_redis
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_driver(session_factory):
    counter = {"n": 0}

    async def _make(status: str = "active", name: str = "Test Driver") -> Driver:
        counter["n"] += 1
        async with session_factory() as session:
            driver = Driver(
                name=name,
                phone=f"+6391700000{counter['n']:02d}",
                vehicle_type="4 Seaters",
                status=status,
                report_count=0,
            )
            session.add(driver)
            await session.commit()
            await session.refresh(driver)
            return driver

    return _make


def booking_payload(**overrides) -> BookingCreateRequest:
    data = {
        "pickup_area": "Cubao",
        "dropoff_area": "Makati",
        "pickup_address": "Gateway Mall, Cubao, Quezon City",
        "dropoff_address": "Ayala Avenue, Makati City",
        "ride_date": date(2026, 10, 20),
        "ride_time": time(9, 30),
        "vehicle_type": "4 Seaters",
        "fare": Decimal("350.00"),
    }
    data.update(overrides)
    return BookingCreateRequest(**data)


@pytest.fixture
def make_booking(session_factory):
    counter = {"n": 0}

    async def _make(passenger_id: str | None = None, status: str = "pending", driver_id: str | None = None) -> Booking:
        counter["n"] += 1
        payload = booking_payload()
        async with session_factory() as session:
            booking = Booking(
                passenger_id=passenger_id or f"passenger-{counter['n']}",
                driver_id=driver_id,
                pickup_area=payload.pickup_area,
                dropoff_area=payload.dropoff_area,
                pickup_address=payload.pickup_address,
                dropoff_address=payload.dropoff_address,
                ride_date=payload.ride_date,
                ride_time=payload.ride_time,
                vehicle_type=payload.vehicle_type.value,
                fare=payload.fare,
                status=status,
            )
            session.add(booking)
            await session.commit()
            await session.refresh(booking)
            return booking

    return _make


@pytest.fixture
def new_booking_payload():
    return booking_payload


def auth_headers(sub: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': sub, 'role': role})}"}


@pytest.fixture
def headers_for():
    return auth_headers
