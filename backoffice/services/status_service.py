import logging
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.errors import ConflictError, InvalidInputError, NotFoundError
from backoffice.models import (
    Booking,
    BookingLog,
    BookingStatus,
    PaymentStatus,
    RoomType,
    TERMINAL_BOOKING_STATUSES,
    User,
)
from backoffice.services.booking_log_service import BookingLogService
from backoffice.services.payment_status import CANONICAL_TABLE, PaymentStatusTable

logger = logging.getLogger(__name__)

PERFORMED_BY = "Admin"


class BookingAction(str, Enum):
    PAID = "paid"
    CHECKIN = "checkin"
    CHECKOUT = "checkout"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    status: BookingStatus
    payment: Optional[PaymentStatus]  # None keeps the current payment status
    log_action: str


TRANSITIONS = {
    BookingAction.PAID: Transition(BookingStatus.CONFIRMED, PaymentStatus.PARTIAL, "Paid"),
    BookingAction.CHECKIN: Transition(BookingStatus.CHECKED_IN, PaymentStatus.PARTIAL, "Check-in"),
    BookingAction.CHECKOUT: Transition(BookingStatus.CHECKED_OUT, PaymentStatus.COMPLETE, "Check-out"),
    BookingAction.CANCEL: Transition(BookingStatus.CANCELLED, None, "Cancel"),
}


@dataclass
class TransitionResult:
    booking_id: int
    status: BookingStatus
    payment_status: str
    log_id: int


def hotel_now() -> datetime:
    """Current wall-clock time at the hotel, naive like the stored columns."""
    return datetime.now(ZoneInfo(settings.hotel_timezone)).replace(tzinfo=None)


def to_hotel_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.hotel_timezone)).replace(tzinfo=None)


def room_label(room_number: Optional[str], room_type_name: Optional[str]) -> str:
    if room_number:
        return f"Room {room_number}"
    if room_type_name:
        return room_type_name
    return "—"


class StatusService:
    """Booking lifecycle transitions with their audit trail."""

    @staticmethod
    def parse_action(raw: str) -> BookingAction:
        try:
            return BookingAction((raw or "").strip().lower())
        except ValueError:
            raise InvalidInputError("Invalid action")

    @classmethod
    async def apply_transition(
        cls,
        db: AsyncSession,
        booking_id: int,
        action: str,
        when: Optional[datetime] = None,
        payment_table: PaymentStatusTable = CANONICAL_TABLE,
    ) -> TransitionResult:
        """
        Apply an admin action to a booking and append its log entry.

        Runs inside the caller's transaction: the booking update and the log
        row are committed or rolled back together.
        """
        stmt = (
            select(Booking, User, RoomType)
            .outerjoin(User, User.id == Booking.user_id)
            .outerjoin(RoomType, RoomType.id == Booking.room_type_id)
            .where(Booking.id == booking_id)
            .with_for_update()
        )
        row = (await db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Booking not found")
        booking, user, room_type = row

        booking_action = cls.parse_action(action)
        if booking.status in TERMINAL_BOOKING_STATUSES:
            logger.warning(
                f"Booking #{booking.id} is {booking.status.value}, rejecting '{booking_action.value}'"
            )
            raise ConflictError("Booking already finalized")

        transition = TRANSITIONS[booking_action]
        when = to_hotel_local(when) if when else None

        guest_name = " ".join(((user.full_name if user else "") or "").split()) or "Guest"
        email = (user.email if user else "") or ""
        label = room_label(booking.room_number, room_type.name if room_type else None)
        old_status = booking.status

        booking.status = transition.status
        if transition.payment is not None:
            booking.payment_status = payment_table.storage_value(transition.payment)

        if booking_action == BookingAction.CHECKIN and when:
            booking.check_in_time = when
        elif booking_action == BookingAction.CHECKOUT and when:
            booking.check_out_time = when
            # check_out stays strictly after check_in
            if when.date() > booking.check_in:
                booking.check_out = when.date()

        await db.flush()

        if booking_action in (BookingAction.CHECKIN, BookingAction.CHECKOUT) and when:
            action_timestamp = when
        else:
            action_timestamp = hotel_now()

        entry = await BookingLogService.append(
            db,
            BookingLog(
                booking_id=booking.id,
                guest_name=guest_name,
                email=email,
                room=label,
                room_number=booking.room_number or "",
                room_type=room_type.name if room_type else "",
                payment_status=booking.payment_status,
                status=transition.status.value,
                check_in=booking.check_in_time or datetime.combine(booking.check_in, time.min),
                check_out=booking.check_out_time or datetime.combine(booking.check_out, time.min),
                last_action=transition.log_action,
                action_timestamp=action_timestamp,
                performed_by=PERFORMED_BY,
            ),
        )

        logger.info(
            f"Booking #{booking.id} ({guest_name}): {old_status.value} -> "
            f"{transition.status.value} via '{booking_action.value}', log #{entry.id}"
        )

        payment = transition.payment.value if transition.payment else booking.payment_status
        return TransitionResult(
            booking_id=booking.id,
            status=transition.status,
            payment_status=payment,
            log_id=entry.id,
        )
