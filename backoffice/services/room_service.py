import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import ConflictError, InvalidInputError, NotFoundError
from backoffice.models import ACTIVE_BOOKING_STATUSES, Booking, Room, RoomStatus, RoomType
from backoffice.schemas.room import RoomCreate, RoomOut, RoomUpdate

logger = logging.getLogger(__name__)


def _is_filter(value: Optional[str]) -> bool:
    return bool(value and value.strip() and value.strip().lower() != "all")


def to_room_out(room: Room, room_type: RoomType) -> RoomOut:
    return RoomOut(
        room_id=room.id,
        room_number=room.room_number,
        status=room.status,
        room_type_id=room_type.id,
        type_name=room_type.name,
        capacity_adults=room_type.capacity_adults,
        capacity_children=room_type.capacity_children,
        price_per_night=room_type.price_per_night,
    )


class RoomService:
    """Room and room-type registry. Mutations run in the caller's transaction."""

    @staticmethod
    async def list_room_types(db: AsyncSession) -> List[RoomType]:
        result = await db.execute(select(RoomType).order_by(RoomType.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_room_type_by_name(db: AsyncSession, name: str) -> Optional[RoomType]:
        result = await db.execute(select(RoomType).where(RoomType.name == name))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_rooms(
        db: AsyncSession,
        search: Optional[str] = None,
        room_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[RoomOut]:
        stmt = select(Room, RoomType).join(RoomType, RoomType.id == Room.room_type_id)

        if _is_filter(search):
            like = f"%{search.strip()}%"
            stmt = stmt.where(or_(Room.room_number.ilike(like), RoomType.name.ilike(like)))
        if _is_filter(room_type):
            stmt = stmt.where(RoomType.name == room_type.strip())
        if _is_filter(status):
            try:
                stmt = stmt.where(Room.status == RoomStatus(status.strip().lower()))
            except ValueError:
                raise InvalidInputError(f"Unknown room status '{status}'")

        result = await db.execute(stmt.order_by(Room.room_number))
        return [to_room_out(room, rt) for room, rt in result.all()]

    @staticmethod
    async def get_room(db: AsyncSession, room_number: str) -> Room:
        result = await db.execute(select(Room).where(Room.room_number == room_number))
        room = result.scalar_one_or_none()
        if not room:
            raise NotFoundError("Room not found")
        return room

    @staticmethod
    async def _room_number_taken(
        db: AsyncSession, room_number: str, exclude_room_id: Optional[int] = None
    ) -> bool:
        stmt = select(Room.id).where(Room.room_number == room_number)
        if exclude_room_id is not None:
            stmt = stmt.where(Room.id != exclude_room_id)
        return (await db.execute(stmt.limit(1))).first() is not None

    @staticmethod
    async def _has_active_bookings(db: AsyncSession, room_number: str) -> bool:
        result = await db.execute(
            select(func.count(Booking.id)).where(
                Booking.room_number == room_number,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
        )
        return result.scalar_one() > 0

    @staticmethod
    def _apply_type_defaults(room_type: RoomType, data) -> None:
        if data.price_per_night is not None:
            room_type.price_per_night = data.price_per_night
        if data.capacity_adults is not None:
            room_type.capacity_adults = data.capacity_adults
        if data.capacity_children is not None:
            room_type.capacity_children = data.capacity_children

    @classmethod
    async def _get_or_create_type(cls, db: AsyncSession, name: str, data) -> tuple[RoomType, bool]:
        room_type = await cls.get_room_type_by_name(db, name)
        if room_type:
            return room_type, False

        room_type = RoomType(
            name=name,
            price_per_night=data.price_per_night or 0,
            capacity_adults=data.capacity_adults or 0,
            capacity_children=data.capacity_children or 0,
        )
        db.add(room_type)
        await db.flush()
        logger.info(f"Created room type '{name}' (#{room_type.id})")
        return room_type, True

    @classmethod
    async def add_room(cls, db: AsyncSession, data: RoomCreate) -> Room:
        type_name = (data.room_type or "").strip()
        if not type_name and not data.room_type_id:
            raise InvalidInputError("Room type is required")

        if await cls._room_number_taken(db, data.room_number):
            raise ConflictError("Room number already exists.")

        if type_name:
            room_type, created = await cls._get_or_create_type(db, type_name, data)
            if not created:
                cls._apply_type_defaults(room_type, data)
        else:
            room_type = await db.get(RoomType, data.room_type_id)
            if not room_type:
                raise NotFoundError("Room type not found")

        room = Room(
            room_number=data.room_number,
            room_type_id=room_type.id,
            status=data.status or RoomStatus.AVAILABLE,
        )
        db.add(room)
        await db.flush()
        logger.info(f"Added room {room.room_number} ({room_type.name})")
        return room

    @classmethod
    async def update_room(cls, db: AsyncSession, data: RoomUpdate) -> Room:
        room = await db.get(Room, data.room_id)
        if not room:
            raise NotFoundError("Room not found")

        room_type_id = data.room_type_id or room.room_type_id
        type_name = (data.type_name or "").strip()
        if type_name:
            room_type, _ = await cls._get_or_create_type(db, type_name, data)
        else:
            room_type = await db.get(RoomType, room_type_id)
            if not room_type:
                raise NotFoundError("Room type not found")

        if data.room_number is not None:
            room_number = data.room_number.strip()
            if not room_number:
                raise InvalidInputError("Room number is required")
            if room_number != room.room_number:
                if await cls._room_number_taken(db, room_number, exclude_room_id=room.id):
                    raise ConflictError("Room number already exists")
                # Bookings reference rooms by number
                if await cls._has_active_bookings(db, room.room_number):
                    raise ConflictError("Room has active bookings")
                room.room_number = room_number

        room.room_type_id = room_type.id
        if data.status is not None:
            room.status = data.status

        cls._apply_type_defaults(room_type, data)
        await db.flush()
        logger.info(f"Updated room #{room.id} ({room.room_number})")
        return room

    @classmethod
    async def delete_rooms(cls, db: AsyncSession, room_ids: List[int]) -> tuple[int, List[str]]:
        """Delete rooms, skipping any that still hold an active booking."""
        if not room_ids:
            raise InvalidInputError("No room IDs provided")

        deleted = 0
        skipped: List[str] = []
        for room_id in room_ids:
            room = await db.get(Room, room_id)
            if not room:
                continue

            if await cls._has_active_bookings(db, room.room_number):
                skipped.append(room.room_number)
                continue

            await db.delete(room)
            deleted += 1

        await db.flush()
        logger.info(f"Deleted {deleted} room(s), skipped {len(skipped)} with active bookings")
        return deleted, skipped

    @staticmethod
    async def grouped_rooms(db: AsyncSession) -> dict[str, list[str]]:
        stmt = (
            select(RoomType.name, Room.room_number)
            .outerjoin(Room, Room.room_type_id == RoomType.id)
            .order_by(RoomType.name, Room.room_number)
        )
        grouped: dict[str, list[str]] = {}
        for type_name, room_number in (await db.execute(stmt)).all():
            rooms = grouped.setdefault(type_name, [])
            if room_number:
                rooms.append(room_number)
        return grouped
