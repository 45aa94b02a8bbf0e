from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models import Booking, BookingStatus, PaymentStatus


class DashboardService:
    @staticmethod
    async def stats(
        db: AsyncSession,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict:
        """Booking counts, optionally limited to bookings created within [start, end]."""
        conditions = []
        if start:
            conditions.append(Booking.created_at >= datetime.combine(start, time.min))
        if end:
            conditions.append(
                Booking.created_at < datetime.combine(end + timedelta(days=1), time.min)
            )

        total = await db.scalar(select(func.count(Booking.id)).where(*conditions))
        pending = await db.scalar(
            select(func.count(Booking.id)).where(
                *conditions, Booking.payment_status == PaymentStatus.PENDING.value
            )
        )

        rows = await db.execute(
            select(Booking.status, func.count(Booking.id))
            .where(*conditions)
            .group_by(Booking.status)
        )
        by_status = {status.value: 0 for status in BookingStatus}
        for status, count in rows.all():
            by_status[status.value] = count

        return {
            "total_bookings": total or 0,
            "pending_payments": pending or 0,
            "by_status": by_status,
        }
