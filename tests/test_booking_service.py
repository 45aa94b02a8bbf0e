"""
Tests for booking creation, overlap checks and listings
"""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from backoffice.core.errors import ConflictError, NotFoundError
from backoffice.database import transaction
from backoffice.models import Booking, BookingStatus
from backoffice.schemas.booking import BookingCreate, Guests
from backoffice.services.booking_service import BookingService, guests_label
from backoffice.services.payment_status import PaymentStatusTable


def new_booking(room_number, check_in, check_out, **kwargs):
    return BookingCreate(room_number=room_number, check_in=check_in, check_out=check_out, **kwargs)


def test_guests_label():
    assert guests_label(2, 1) == "Adult 2 | Child 1"


def test_checkout_must_follow_checkin():
    with pytest.raises(ValueError):
        new_booking("101", date(2025, 11, 10), date(2025, 11, 10))


@pytest.mark.asyncio
class TestCreateBooking:
    async def test_defaults(self, session, hotel):
        async with transaction(session):
            booking = await BookingService.create_booking(
                session,
                new_booking("102", date(2025, 11, 10), date(2025, 11, 12),
                            user_id=hotel.guest_id, guests=Guests(adults=2, children=1)),
            )

        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == "Pending"
        assert booking.room_type_id == hotel.standard_type_id
        assert booking.total_price == Decimal("3000.00")
        assert (booking.adults, booking.children) == (2, 1)

    async def test_paid_flag_and_explicit_price(self, session, hotel):
        async with transaction(session):
            booking = await BookingService.create_booking(
                session,
                new_booking("201", date(2025, 11, 10), date(2025, 11, 11),
                            is_paid=True, total_price=Decimal("2000")),
            )

        assert booking.payment_status == "Partial Payment"
        assert booking.total_price == Decimal("2000")

    async def test_paid_flag_uses_legacy_payment_spelling(self, session, hotel):
        legacy = PaymentStatusTable(["Pending", "Paid", "Completed"])

        async with transaction(session):
            paid = await BookingService.create_booking(
                session, new_booking("102", date(2025, 11, 10), date(2025, 11, 11), is_paid=True),
                legacy,
            )
            unpaid = await BookingService.create_booking(
                session, new_booking("103", date(2025, 11, 10), date(2025, 11, 11)), legacy
            )

        assert paid.payment_status == "Paid"
        assert unpaid.payment_status == "Pending"

    async def test_overlap_rejected_and_nothing_written(self, session, hotel):
        with pytest.raises(ConflictError):
            async with transaction(session):
                await BookingService.create_booking(
                    session, new_booking("101", date(2025, 11, 12), date(2025, 11, 14))
                )

        rows = (await session.execute(select(Booking.id))).all()
        assert len(rows) == 1

    async def test_adjacent_stay_allowed(self, session, hotel):
        # Existing booking in 101 checks out on 2025-11-13
        async with transaction(session):
            booking = await BookingService.create_booking(
                session, new_booking("101", date(2025, 11, 13), date(2025, 11, 15))
            )
        assert booking.id != hotel.booking_id

    async def test_cancelled_booking_frees_room(self, session, hotel):
        booking = await session.get(Booking, hotel.booking_id)
        booking.status = BookingStatus.CANCELLED
        await session.commit()

        async with transaction(session):
            await BookingService.create_booking(
                session, new_booking("101", date(2025, 11, 10), date(2025, 11, 13))
            )

    async def test_unknown_room(self, session, hotel):
        with pytest.raises(NotFoundError):
            async with transaction(session):
                await BookingService.create_booking(
                    session, new_booking("999", date(2025, 11, 10), date(2025, 11, 12))
                )

    async def test_unknown_user(self, session, hotel):
        with pytest.raises(NotFoundError):
            async with transaction(session):
                await BookingService.create_booking(
                    session,
                    new_booking("102", date(2025, 11, 10), date(2025, 11, 12), user_id=4242),
                )


@pytest.mark.asyncio
class TestAvailabilityChecks:
    async def test_room_availability(self, session, hotel):
        assert not await BookingService.is_room_available(
            session, "101", date(2025, 11, 11), date(2025, 11, 12)
        )
        assert await BookingService.is_room_available(
            session, "101", date(2025, 11, 13), date(2025, 11, 14)
        )

    async def test_type_availability(self, session, hotel):
        assert await BookingService.is_type_available(
            session, hotel.standard_type_id, date(2025, 11, 10), date(2025, 11, 11)
        )

        async with transaction(session):
            await BookingService.create_booking(
                session, new_booking("201", date(2025, 11, 10), date(2025, 11, 12))
            )
        assert not await BookingService.is_type_available(
            session, hotel.deluxe_type_id, date(2025, 11, 11), date(2025, 11, 12)
        )


@pytest.mark.asyncio
class TestListings:
    async def test_admin_listing(self, session, hotel):
        bookings = await BookingService.list_bookings(session)

        assert len(bookings) == 1
        row = bookings[0]
        assert row.guest_name == "Maria  Santos"
        assert row.email == "maria@example.com"
        assert row.room_type == "Standard"
        assert row.guests == "Adult 2 | Child 0"
        assert row.booking_status == BookingStatus.CONFIRMED

    async def test_calendar_guest_fallbacks(self, session, hotel):
        async with transaction(session):
            await BookingService.create_booking(
                session,
                new_booking("102", date(2025, 11, 1), date(2025, 11, 3), notes="Walk-in Lee"),
            )
            await BookingService.create_booking(
                session, new_booking("103", date(2025, 11, 2), date(2025, 11, 4))
            )

        calendar = await BookingService.calendar_bookings(session)

        assert [b.guest for b in calendar] == ["Walk-in Lee", "Guest", "Maria  Santos"]
        assert all(b.source == "Direct" for b in calendar)

    async def test_calendar_excludes_finished_stays(self, session, hotel):
        booking = await session.get(Booking, hotel.booking_id)
        booking.status = BookingStatus.CHECKED_OUT
        await session.commit()

        assert await BookingService.calendar_bookings(session) == []
        assert await BookingService.active_bookings(session) == []

    async def test_user_bookings(self, session, hotel):
        bookings = await BookingService.list_user_bookings(session, hotel.guest_id)
        assert [b.id for b in bookings] == [hotel.booking_id]
        assert await BookingService.list_user_bookings(session, 4242) == []

    async def test_availability_matrix(self, session, hotel):
        matrix = await BookingService.availability_matrix(session, 2025, 11)

        assert set(matrix) == {"Standard", "Deluxe"}
        assert len(matrix["Standard"]) == 30
        assert matrix["Standard"][date(2025, 11, 9)] == 3
        assert matrix["Standard"][date(2025, 11, 12)] == 2
        assert matrix["Standard"][date(2025, 11, 13)] == 3
        assert matrix["Deluxe"][date(2025, 11, 12)] == 1
