import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import ConflictError, InvalidInputError, NotFoundError
from backoffice.domain.calendar import compute_availability, get_month_dates
from backoffice.models import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    PaymentStatus,
    Room,
    RoomType,
    User,
)
from backoffice.schemas.booking import (
    AdminBookingOut,
    BookingCreate,
    BookingOut,
    CalendarBookingOut,
)
from backoffice.services.payment_status import CANONICAL_TABLE, PaymentStatusTable
from backoffice.services.room_service import RoomService

logger = logging.getLogger(__name__)

BOOKING_SOURCE = "Direct"


def guests_label(adults: int, children: int) -> str:
    return f"Adult {adults} | Child {children}"


def to_booking_out(booking: Booking) -> BookingOut:
    return BookingOut(
        booking_id=booking.id,
        user_id=booking.user_id,
        room_type_id=booking.room_type_id,
        room_number=booking.room_number,
        check_in=booking.check_in,
        check_out=booking.check_out,
        adults=booking.adults,
        children=booking.children,
        total_price=booking.total_price,
        payment_status=booking.payment_status,
        status=booking.status,
    )


class BookingService:
    """Booking store: creation with overlap checks, listings and the availability matrix."""

    @staticmethod
    def _overlapping(check_in: date, check_out: date):
        # Half-open stays: a check-out day can be the next guest's check-in day
        return and_(
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )

    @classmethod
    async def is_room_available(
        cls,
        db: AsyncSession,
        room_number: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        query = select(Booking.id).where(
            Booking.room_number == room_number,
            cls._overlapping(check_in, check_out),
        )
        if exclude_booking_id:
            query = query.where(Booking.id != exclude_booking_id)

        # Only fetch first conflict, no need to load all
        result = await db.execute(query.limit(1))
        return result.first() is None

    @classmethod
    async def is_type_available(
        cls,
        db: AsyncSession,
        room_type_id: int,
        check_in: date,
        check_out: date,
    ) -> bool:
        """True when at least one room of the type is free for the whole stay."""
        busy_rooms = select(Booking.room_number).where(cls._overlapping(check_in, check_out))
        query = select(Room.id).where(
            Room.room_type_id == room_type_id,
            Room.room_number.not_in(busy_rooms),
        )
        result = await db.execute(query.limit(1))
        return result.first() is not None

    @classmethod
    async def create_booking(
        cls,
        db: AsyncSession,
        data: BookingCreate,
        payment_table: PaymentStatusTable = CANONICAL_TABLE,
    ) -> Booking:
        """
        Create a Confirmed booking for a specific room.

        Runs in the caller's transaction; overlapping active bookings on the
        same room are rejected with ConflictError.
        """
        if data.check_out <= data.check_in:
            raise InvalidInputError("check_out must be after check_in")

        room = await RoomService.get_room(db, data.room_number)
        room_type = await db.get(RoomType, room.room_type_id)

        if data.user_id is not None and not await db.get(User, data.user_id):
            raise NotFoundError("User not found")

        if not await cls.is_room_available(db, room.room_number, data.check_in, data.check_out):
            raise ConflictError("Room is already booked for the selected dates")

        nights = (data.check_out - data.check_in).days
        total_price = data.total_price
        if total_price is None:
            total_price = Decimal(room_type.price_per_night) * nights

        payment = PaymentStatus.PARTIAL if data.is_paid else PaymentStatus.PENDING

        booking = Booking(
            user_id=data.user_id,
            room_type_id=room_type.id,
            room_number=room.room_number,
            check_in=data.check_in,
            check_out=data.check_out,
            adults=data.guests.adults,
            children=data.guests.children,
            total_price=total_price,
            payment_status=payment_table.storage_value(payment),
            status=BookingStatus.CONFIRMED,
            notes=data.notes,
        )
        db.add(booking)
        await db.flush()

        logger.info(
            f"Booking #{booking.id} created: room {booking.room_number}, "
            f"{booking.check_in} - {booking.check_out} ({nights} nights)"
        )
        return booking

    @staticmethod
    async def list_bookings(db: AsyncSession) -> List[AdminBookingOut]:
        query = (
            select(Booking, User, RoomType)
            .outerjoin(User, User.id == Booking.user_id)
            .outerjoin(RoomType, RoomType.id == Booking.room_type_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        result = await db.execute(query)

        bookings = []
        for booking, user, room_type in result.all():
            bookings.append(
                AdminBookingOut(
                    booking_id=booking.id,
                    guest_name=(user.full_name if user else None) or "Guest",
                    email=(user.email if user else None) or "",
                    room_type=room_type.name if room_type else "",
                    room_number=booking.room_number,
                    check_in=booking.check_in,
                    check_out=booking.check_out,
                    check_in_time=booking.check_in_time,
                    check_out_time=booking.check_out_time,
                    guests=guests_label(booking.adults, booking.children),
                    total_price=booking.total_price,
                    payment_status=booking.payment_status,
                    booking_status=booking.status,
                    created_at=booking.created_at,
                )
            )
        return bookings

    @staticmethod
    async def list_user_bookings(db: AsyncSession, user_id: int) -> List[Booking]:
        query = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.check_in.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def active_bookings(db: AsyncSession) -> List[Booking]:
        query = (
            select(Booking)
            .where(Booking.status.in_(ACTIVE_BOOKING_STATUSES))
            .order_by(Booking.check_in)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def calendar_bookings(db: AsyncSession) -> List[CalendarBookingOut]:
        query = (
            select(Booking, User)
            .outerjoin(User, User.id == Booking.user_id)
            .where(Booking.status.in_(ACTIVE_BOOKING_STATUSES))
            .order_by(Booking.check_in, Booking.id)
        )
        result = await db.execute(query)

        return [
            CalendarBookingOut(
                id=booking.id,
                room_number=booking.room_number,
                checkIn=booking.check_in,
                checkOut=booking.check_out,
                guest=(user.full_name if user else None) or booking.notes or "Guest",
                source=BOOKING_SOURCE,
                status=booking.status,
            )
            for booking, user in result.all()
        ]

    @classmethod
    async def availability_matrix(
        cls, db: AsyncSession, year: int, month: int
    ) -> dict[str, dict[date, int]]:
        if not 1 <= month <= 12:
            raise InvalidInputError("month must be between 1 and 12")

        dates = get_month_dates(year, month)
        rooms_by_type = await RoomService.grouped_rooms(db)
        bookings = await cls.active_bookings(db)
        return compute_availability(rooms_by_type, bookings, dates)
