import asyncio
import sys
import os
import argparse
from decimal import Decimal

# Add project root to path
sys.path.append(os.getcwd())

from sqlalchemy import select

from backoffice.database import AsyncSessionLocal, init_db, transaction
from backoffice.models import User
from backoffice.schemas.room import RoomCreate
from backoffice.services.room_service import RoomService

DEMO_ROOMS = {
    "Standard": (Decimal("1500.00"), 2, 1, ["101", "102", "103"]),
    "Deluxe": (Decimal("2500.00"), 2, 2, ["201", "202"]),
    "Family Suite": (Decimal("4000.00"), 4, 3, ["301"]),
}


async def seed(guest_name: str, guest_email: str):
    await init_db()

    async with AsyncSessionLocal() as session:
        async with transaction(session):
            for type_name, (price, adults, children, numbers) in DEMO_ROOMS.items():
                for number in numbers:
                    if await RoomService._room_number_taken(session, number):
                        print(f"Room {number} already exists, skipping")
                        continue
                    await RoomService.add_room(
                        session,
                        RoomCreate(
                            room_number=number,
                            room_type=type_name,
                            price_per_night=price,
                            capacity_adults=adults,
                            capacity_children=children,
                        ),
                    )
                    print(f"Added room {number} ({type_name})")

            existing = await session.execute(select(User).where(User.email == guest_email))
            if existing.scalar_one_or_none():
                print(f"Guest '{guest_email}' already exists.")
            else:
                session.add(User(full_name=guest_name, email=guest_email))
                print(f"Added guest {guest_name} <{guest_email}>")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo room types, rooms and a guest")
    parser.add_argument("--guest-name", default="Demo Guest")
    parser.add_argument("--guest-email", default="guest@example.com")
    args = parser.parse_args()

    asyncio.run(seed(args.guest_name, args.guest_email))
