"""
Conflict detection for half-open booking ranges.

``overlaps`` is the one predicate used everywhere: admission control, admin
edits, the availability read path and client-side selection previews all go
through it, either directly or via ``IntervalIndex``.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotbook.core.enums import ACTIVE_STATUSES
from slotbook.core.errors import ValidationError
from slotbook.models.booking import Booking

ACTIVE_STATUS_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


def check_range(start: datetime, end: datetime) -> None:
    if start is None or end is None:
        raise ValidationError("start and end are required")
    if end <= start:
        raise ValidationError("end must be after start")


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """[start_a, end_a) and [start_b, end_b) intersect. Touching ends do not."""
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class Interval:
    booking_id: str
    start: datetime
    end: datetime

    @classmethod
    def of(cls, booking: Booking) -> "Interval":
        return cls(booking.id, booking.start_time, booking.end_time)


class IntervalIndex:
    """Intervals sorted by start, searchable by binary search.

    A running maximum of end times keeps lookups correct even if some of the
    intervals overlap one another; for the non-overlapping active set it is
    simply the sorted list of ends.
    """

    def __init__(self, intervals: Iterable[Interval] = ()):
        self._items = sorted(intervals, key=lambda i: (i.start, i.end))
        self._starts = [i.start for i in self._items]
        self._max_ends = []
        running = None
        for item in self._items:
            running = item.end if running is None or item.end > running else running
            self._max_ends.append(running)

    @classmethod
    def from_bookings(cls, bookings: Iterable[Booking]) -> "IntervalIndex":
        return cls(Interval.of(b) for b in bookings)

    def __len__(self) -> int:
        return len(self._items)

    def overlapping(self, start: datetime, end: datetime, exclude_id: Optional[str] = None) -> list[Interval]:
        check_range(start, end)
        hi = bisect_left(self._starts, end)  # items starting before `end`
        lo = bisect_right(self._max_ends, start, 0, hi)  # first item whose prefix reaches past `start`
        return [
            item for item in self._items[lo:hi]
            if item.booking_id != exclude_id and overlaps(item.start, item.end, start, end)
        ]

    def is_free(self, start: datetime, end: datetime, exclude_id: Optional[str] = None) -> bool:
        return not self.overlapping(start, end, exclude_id)


def active_in_window(db: Session, resource_id: str, start: datetime, end: datetime) -> list[Booking]:
    """Active bookings of a resource intersecting [start, end), ordered by start."""
    check_range(start, end)
    stmt = (
        select(Booking)
        .where(
            Booking.resource_id == resource_id,
            Booking.status.in_(ACTIVE_STATUS_VALUES),
            Booking.start_time < end,
            Booking.end_time > start,
        )
        .order_by(Booking.start_time)
    )
    return list(db.execute(stmt).scalars().all())


def find_conflicts(db: Session, resource_id: str, start: datetime, end: datetime,
                   exclude_booking_id: Optional[str] = None) -> list[Interval]:
    index = IntervalIndex.from_bookings(active_in_window(db, resource_id, start, end))
    return index.overlapping(start, end, exclude_booking_id)


def is_range_free(db: Session, resource_id: str, start: datetime, end: datetime,
                  exclude_booking_id: Optional[str] = None) -> bool:
    return not find_conflicts(db, resource_id, start, end, exclude_booking_id)
