import csv
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import Select, String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.models import BookingLog

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Log ID",
    "Booking ID",
    "Guest Name",
    "Payment Status",
    "Status",
    "Room",
    "Check-In",
    "Check-Out",
    "Last Action",
    "Timestamp",
    "Performed By",
]


def _clean(value: Optional[str]) -> Optional[str]:
    """Blank and 'All' mean 'no filter' in the admin console."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == "all":
        return None
    return value


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass
class LogFilters:
    search: Optional[str] = None
    status: Optional[str] = None
    room_type: Optional[str] = None
    payment_status: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self):
        self.search = _clean(self.search)
        self.status = _clean(self.status)
        self.room_type = _clean(self.room_type)
        self.payment_status = _clean(self.payment_status)


class BookingLogService:
    """Append-only audit log: writes happen only through `append`."""

    @staticmethod
    async def append(db: AsyncSession, entry: BookingLog) -> BookingLog:
        db.add(entry)
        await db.flush()
        return entry

    @staticmethod
    def _filtered(filters: LogFilters) -> Select:
        stmt = select(BookingLog)

        if filters.search:
            like = _like(filters.search)
            stmt = stmt.where(
                or_(
                    cast(BookingLog.id, String).ilike(like, escape="\\"),
                    cast(BookingLog.booking_id, String).ilike(like, escape="\\"),
                    BookingLog.guest_name.ilike(like, escape="\\"),
                    BookingLog.room.ilike(like, escape="\\"),
                )
            )
        if filters.status:
            stmt = stmt.where(BookingLog.status == filters.status)
        if filters.room_type:
            like = _like(filters.room_type)
            stmt = stmt.where(
                or_(
                    BookingLog.room.ilike(like, escape="\\"),
                    BookingLog.room_type.ilike(like, escape="\\"),
                )
            )
        if filters.payment_status:
            stmt = stmt.where(BookingLog.payment_status == filters.payment_status)
        # Date filters apply to the calendar date of the check-in snapshot
        if filters.date_from:
            stmt = stmt.where(BookingLog.check_in >= datetime.combine(filters.date_from, time.min))
        if filters.date_to:
            next_day = datetime.combine(filters.date_to + timedelta(days=1), time.min)
            stmt = stmt.where(BookingLog.check_in < next_day)

        return stmt.order_by(BookingLog.action_timestamp.desc(), BookingLog.id.desc())

    @classmethod
    async def query(
        cls,
        db: AsyncSession,
        filters: LogFilters,
        limit: Optional[int] = None,
    ) -> list[BookingLog]:
        if limit is None:
            limit = settings.booking_logs_limit
        stmt = cls._filtered(filters).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    async def export_csv(cls, db: AsyncSession, filters: LogFilters) -> str:
        """All matching rows (no cap) as CSV text, newest first."""
        result = await db.execute(cls._filtered(filters))
        logs = result.scalars().all()

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for log in logs:
            writer.writerow(
                _format_cell(v)
                for v in (
                    log.id,
                    log.booking_id,
                    log.guest_name,
                    log.payment_status,
                    log.status,
                    log.room,
                    log.check_in,
                    log.check_out,
                    log.last_action,
                    log.action_timestamp,
                    log.performed_by,
                )
            )

        logger.info(f"Exported {len(logs)} booking log rows")
        return buffer.getvalue()
