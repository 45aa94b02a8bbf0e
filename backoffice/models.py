from datetime import date, datetime
from enum import Enum
from typing import Optional
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    String,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.database import Base


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    MAINTENANCE = "maintenance"


class BookingStatus(str, Enum):
    CONFIRMED = "Confirmed"
    CHECKED_IN = "Checked-in"
    CHECKED_OUT = "Checked-out"
    CANCELLED = "Cancelled"


# Bookings that hold their room (overlap checks, calendar, availability)
ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})
TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED})


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PARTIAL = "Partial Payment"
    COMPLETE = "Payment Complete"


class User(Base):
    """Guest identity; authentication lives outside this service."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    full_name: Mapped[str] = mapped_column(String(120))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    bookings: Mapped[list["Booking"]] = relationship(back_populates="user")


class RoomType(Base):
    __tablename__ = "room_types"
    __table_args__ = (
        CheckConstraint("price_per_night >= 0", name="ck_room_types_price_non_negative"),
        CheckConstraint("capacity_adults >= 0", name="ck_room_types_adults_non_negative"),
        CheckConstraint("capacity_children >= 0", name="ck_room_types_children_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    capacity_adults: Mapped[int] = mapped_column(Integer, default=0)
    capacity_children: Mapped[int] = mapped_column(Integer, default=0)

    rooms: Mapped[list["Room"]] = relationship(back_populates="room_type")


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    room_type_id: Mapped[int] = mapped_column(ForeignKey("room_types.id"), index=True)
    room_type: Mapped["RoomType"] = relationship(back_populates="rooms")
    status: Mapped[RoomStatus] = mapped_column(
        SQLEnum(
            RoomStatus,
            name="room_status",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        default=RoomStatus.AVAILABLE,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_dates_ordered"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Guest is optional: walk-ins are recorded with notes only
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    user: Mapped[Optional["User"]] = relationship(back_populates="bookings")

    room_type_id: Mapped[int] = mapped_column(ForeignKey("room_types.id"), index=True)
    room_type: Mapped["RoomType"] = relationship()
    # Plain value, not a foreign key: bookings outlive room renumbering/deletion
    room_number: Mapped[str] = mapped_column(String(20), index=True)

    check_in: Mapped[date] = mapped_column(Date)
    check_out: Mapped[date] = mapped_column(Date)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)

    # Stored as text so legacy payment vocabularies remain writable
    payment_status: Mapped[str] = mapped_column(
        String(32), default=PaymentStatus.PENDING.value
    )
    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(
            BookingStatus,
            name="booking_status",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        default=BookingStatus.CONFIRMED,
        index=True,
    )

    check_in_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class BookingLog(Base):
    """
    Append-only audit trail of booking status transitions.

    Rows carry snapshots instead of foreign keys so they survive deletion
    of the booking or the room they describe.
    """

    __tablename__ = "booking_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(Integer, index=True)
    guest_name: Mapped[str] = mapped_column(String(120))
    email: Mapped[str] = mapped_column(String(255), default="")
    room: Mapped[str] = mapped_column(String(120))
    room_number: Mapped[str] = mapped_column(String(20), default="")
    room_type: Mapped[str] = mapped_column(String(100), default="")
    payment_status: Mapped[str] = mapped_column(String(32))
    status: Mapped[str] = mapped_column(String(20), index=True)
    check_in: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    check_out: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_action: Mapped[str] = mapped_column(String(20))
    action_timestamp: Mapped[datetime] = mapped_column(DateTime, index=True)
    performed_by: Mapped[str] = mapped_column(String(50), default="Admin")
