"""
Pytest configuration for back-office tests
"""
import os
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure backoffice is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

# The app-wide engine must never touch a real database under test
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from backoffice.database import Base  # noqa: E402
from backoffice.models import Booking, BookingStatus, User  # noqa: E402
from backoffice.schemas.room import RoomCreate  # noqa: E402
from backoffice.services.room_service import RoomService  # noqa: E402


@dataclass
class Hotel:
    guest_id: int
    standard_type_id: int
    deluxe_type_id: int
    booking_id: int


@pytest_asyncio.fixture
async def engine():
    # One shared connection so every session sees the same in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


async def seed_hotel(session) -> Hotel:
    """Standard rooms 101-103, Deluxe 201, one guest and one Confirmed booking in 101."""
    for number in ("101", "102", "103"):
        await RoomService.add_room(
            session,
            RoomCreate(
                room_number=number,
                room_type="Standard",
                price_per_night=Decimal("1500.00"),
                capacity_adults=2,
                capacity_children=1,
            ),
        )
    deluxe = await RoomService.add_room(
        session,
        RoomCreate(
            room_number="201",
            room_type="Deluxe",
            price_per_night=Decimal("2500.00"),
            capacity_adults=2,
            capacity_children=2,
        ),
    )
    standard = await RoomService.get_room_type_by_name(session, "Standard")

    guest = User(full_name="Maria  Santos", email="maria@example.com")
    session.add(guest)
    await session.flush()

    booking = Booking(
        user_id=guest.id,
        room_type_id=standard.id,
        room_number="101",
        check_in=date(2025, 11, 10),
        check_out=date(2025, 11, 13),
        adults=2,
        children=0,
        total_price=Decimal("4500.00"),
        payment_status="Pending",
        status=BookingStatus.CONFIRMED,
    )
    session.add(booking)
    await session.commit()

    return Hotel(
        guest_id=guest.id,
        standard_type_id=standard.id,
        deluxe_type_id=deluxe.room_type_id,
        booking_id=booking.id,
    )


@pytest_asyncio.fixture
async def hotel(session) -> Hotel:
    return await seed_hotel(session)


@pytest.fixture
def api():
    """
    TestClient over the real app with a freshly seeded in-memory database.

    Startup creates the schema; shutdown disposes the engine, which drops the
    in-memory database, so every test starts clean.
    """
    from fastapi.testclient import TestClient

    from backoffice.database import AsyncSessionLocal
    from backoffice.main import app

    async def seed():
        async with AsyncSessionLocal() as session:
            return await seed_hotel(session)

    with TestClient(app) as client:
        hotel = client.portal.call(seed)
        yield client, hotel
