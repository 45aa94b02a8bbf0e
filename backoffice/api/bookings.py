import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.deps import get_payment_table
from backoffice.core.config import settings
from backoffice.core.errors import InvalidInputError
from backoffice.core.rate_limiter import limiter
from backoffice.database import get_db, transaction
from backoffice.schemas.booking import (
    AvailabilityCheck,
    BookingCreate,
    BookingLogOut,
    StatusUpdate,
)
from backoffice.services.booking_log_service import BookingLogService, LogFilters
from backoffice.services.booking_service import BookingService, to_booking_out
from backoffice.services.payment_status import PaymentStatusTable
from backoffice.services.status_service import StatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _parse_date(value: Optional[str], field: str) -> Optional[date]:
    # The console sends empty strings for cleared date pickers
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise InvalidInputError(f"{field}: invalid date '{value}'")


def log_filters(
    search: Optional[str] = None,
    status: Optional[str] = None,
    room_type: Optional[str] = None,
    payment_status: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> LogFilters:
    return LogFilters(
        search=search,
        status=status,
        room_type=room_type,
        payment_status=payment_status,
        date_from=_parse_date(date_from, "date_from"),
        date_to=_parse_date(date_to, "date_to"),
    )


@router.post("/check-availability")
async def check_availability(
    payload: AvailabilityCheck,
    db: AsyncSession = Depends(get_db),
):
    if payload.room_number:
        is_available = await BookingService.is_room_available(
            db, payload.room_number, payload.check_in, payload.check_out
        )
    else:
        is_available = await BookingService.is_type_available(
            db, payload.room_type_id, payload.check_in, payload.check_out
        )
    return {"success": True, "isAvailable": is_available}


@router.post("/book", status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    db: AsyncSession = Depends(get_db),
    payment_table: PaymentStatusTable = Depends(get_payment_table),
):
    async with transaction(db):
        booking = await BookingService.create_booking(db, payload, payment_table)

    return {
        "success": True,
        "message": "Booking created successfully",
        "booking": to_booking_out(booking),
    }


@router.get("/user/{user_id}")
async def user_bookings(user_id: int, db: AsyncSession = Depends(get_db)):
    bookings = await BookingService.list_user_bookings(db, user_id)
    return {"success": True, "bookings": [to_booking_out(b) for b in bookings]}


@router.get("/admin/all")
async def all_bookings(db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await BookingService.list_bookings(db)}


@router.post("/admin/update-status")
async def update_status(
    payload: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    payment_table: PaymentStatusTable = Depends(get_payment_table),
):
    """
    Apply an admin action (paid, checkin, checkout, cancel) to a booking.

    The booking update and its log entry commit together or not at all.
    """
    if not payload.booking_id or not payload.action:
        raise InvalidInputError("Missing booking_id or action")

    async with transaction(db):
        result = await StatusService.apply_transition(
            db,
            payload.booking_id,
            payload.action,
            when=payload.when,
            payment_table=payment_table,
        )

    return {
        "success": True,
        "message": "Booking status updated successfully.",
        "status": result.status.value,
        "payment_status": result.payment_status,
    }


@router.get("/admin/logs")
async def booking_logs(
    filters: LogFilters = Depends(log_filters),
    db: AsyncSession = Depends(get_db),
):
    logs = await BookingLogService.query(db, filters)
    return {"success": True, "data": [BookingLogOut.model_validate(log) for log in logs]}


@router.get("/admin/logs/export")
@limiter.limit(settings.rate_limit_export)
async def export_booking_logs(
    request: Request,
    filters: LogFilters = Depends(log_filters),
    db: AsyncSession = Depends(get_db),
):
    content = await BookingLogService.export_csv(db, filters)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="booking_logs_{timestamp}.csv"'
        },
    )


@router.get("/admin/calendar")
async def calendar_bookings(db: AsyncSession = Depends(get_db)):
    return await BookingService.calendar_bookings(db)


@router.get("/admin/availability")
async def availability(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    matrix = await BookingService.availability_matrix(db, year, month)
    return {
        "success": True,
        "data": {
            type_name: {day.isoformat(): free for day, free in per_day.items()}
            for type_name, per_day in matrix.items()
        },
    }
