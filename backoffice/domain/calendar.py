"""
Calendar helpers and the room availability calculation.

Stays are half-open intervals: a booking occupies its room on every date
``check_in <= day < check_out``, so a check-out and the next check-in may
share a date.
"""
import calendar
import datetime
from typing import Iterable, Mapping, Sequence


def get_month_dates(year: int, month: int) -> list[datetime.date]:
    _, days_in_month = calendar.monthrange(year, month)
    return [
        datetime.date(year, month, day)
        for day in range(1, days_in_month + 1)
    ]


def date_range(start: datetime.date, end: datetime.date) -> list[datetime.date]:
    """Every date from start to end, both inclusive."""
    days = (end - start).days
    return [start + datetime.timedelta(days=i) for i in range(days + 1)]


def overlaps(
    start_a: datetime.date,
    end_a: datetime.date,
    start_b: datetime.date,
    end_b: datetime.date,
) -> bool:
    return start_a < end_b and start_b < end_a


def compute_availability(
    rooms_by_type: Mapping[str, Sequence[str]],
    active_bookings: Iterable,
    dates: Sequence[datetime.date],
) -> dict[str, dict[datetime.date, int]]:
    """
    Free-room count per room type per date.

    ``active_bookings`` are objects exposing ``room_number``, ``check_in``
    and ``check_out``; the caller filters out cancelled and checked-out
    stays. A room counts once per date however many bookings cover it.
    """
    bookings = list(active_bookings)
    availability: dict[str, dict[datetime.date, int]] = {}

    for type_name, rooms in rooms_by_type.items():
        room_set = {str(r) for r in rooms}
        typed = [b for b in bookings if str(b.room_number) in room_set]

        per_day: dict[datetime.date, int] = {}
        for day in dates:
            occupied = {
                str(b.room_number)
                for b in typed
                if b.check_in <= day < b.check_out
            }
            per_day[day] = len(room_set) - len(occupied)
        availability[type_name] = per_day

    return availability
