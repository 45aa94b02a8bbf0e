"""
Canonical -> storable payment status values.

Older deployments declare ``bookings.payment_status`` as an ENUM that predates
the current vocabulary. The table is resolved once at startup from the live
column definition so transitions never write a value the column rejects.
"""
import logging
from typing import Optional, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import NoSuchTableError
from sqlalchemy.ext.asyncio import AsyncEngine

from backoffice.models import PaymentStatus

logger = logging.getLogger(__name__)

# Legacy spellings accepted in place of a missing canonical value
LEGACY_EQUIVALENTS = {
    PaymentStatus.PARTIAL: "Paid",
    PaymentStatus.COMPLETE: "Completed",
}


class PaymentStatusTable:
    def __init__(self, allowed: Optional[Sequence[str]] = None):
        self.allowed = list(allowed) if allowed else [s.value for s in PaymentStatus]
        self._storage = {status: self._resolve(status) for status in PaymentStatus}

    def _resolve(self, status: PaymentStatus) -> str:
        if status.value in self.allowed:
            return status.value
        legacy = LEGACY_EQUIVALENTS.get(status)
        if legacy and legacy in self.allowed:
            return legacy
        if PaymentStatus.PENDING.value in self.allowed:
            return PaymentStatus.PENDING.value
        return self.allowed[0]

    def storage_value(self, status: PaymentStatus) -> str:
        return self._storage[status]

    @property
    def is_canonical(self) -> bool:
        return all(self._storage[s] == s.value for s in PaymentStatus)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{s.value}->{v}" for s, v in self._storage.items())
        return f"PaymentStatusTable({pairs})"


CANONICAL_TABLE = PaymentStatusTable()


def _column_enum_values(sync_conn) -> list[str]:
    for column in inspect(sync_conn).get_columns("bookings"):
        if column["name"] == "payment_status":
            return list(getattr(column["type"], "enums", None) or [])
    return []


async def resolve_payment_status_table(engine: AsyncEngine) -> PaymentStatusTable:
    try:
        async with engine.connect() as conn:
            allowed = await conn.run_sync(_column_enum_values)
    except NoSuchTableError:
        logger.warning("bookings table missing, using canonical payment statuses")
        return CANONICAL_TABLE

    table = PaymentStatusTable(allowed)
    if table.is_canonical:
        logger.info("Payment status column accepts the canonical vocabulary")
    else:
        logger.warning(f"Legacy payment status column, using {table!r}")
    return table
