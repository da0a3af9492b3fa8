"""
Read path for rendering a resource's schedule.

The selection helpers take an ``IntervalIndex`` rather than a session so the
same checks can run against bookings a client already fetched; the server-side
admission in ``booking_service`` stays authoritative.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from slotbook.core.config import settings
from slotbook.core.errors import ValidationError
from slotbook.models.booking import Booking
from slotbook.services.conflict_detector import IntervalIndex, active_in_window, check_range
from slotbook.services.resource_service import get_resource


@dataclass(frozen=True)
class SelectionPreview:
    start: datetime
    end: datetime
    valid: bool
    blocked_units: list[datetime] = field(default_factory=list)


@dataclass(frozen=True)
class GridCell:
    start: datetime
    end: datetime
    occupied: bool
    booking_id: Optional[str] = None


@dataclass(frozen=True)
class DaySchedule:
    day: date
    cells: list[GridCell]


def active_bookings(db: Session, resource_id: str, window_start: datetime, window_end: datetime) -> list[Booking]:
    """Active bookings of ``resource_id`` intersecting the window, ordered by start."""
    check_range(window_start, window_end)
    get_resource(db, resource_id)
    return active_in_window(db, resource_id, window_start, window_end)


def _check_unit(unit: timedelta) -> None:
    if unit <= timedelta(0):
        raise ValidationError("selection unit must be positive")


def selection_range(anchor: datetime, current: datetime, unit: timedelta) -> tuple[datetime, datetime]:
    """Range covered by a drag from the unit at ``anchor`` to the unit at ``current``.

    Both ends are inclusive units, so the range runs to the end of the later one.
    A drag is confined to a single day.
    """
    _check_unit(unit)
    if anchor.date() != current.date():
        raise ValidationError("a selection must stay within one day")
    first, last = min(anchor, current), max(anchor, current)
    return first, last + unit


def blocked_units(index: IntervalIndex, start: datetime, end: datetime, unit: timedelta) -> list[datetime]:
    """Start of every unit in [start, end) that overlaps an active booking."""
    _check_unit(unit)
    check_range(start, end)
    blocked = []
    cursor = start
    while cursor < end:
        unit_end = min(cursor + unit, end)
        if not index.is_free(cursor, unit_end):
            blocked.append(cursor)
        cursor += unit
    return blocked


def check_selection(index: IntervalIndex, anchor: datetime, current: datetime, unit: timedelta) -> SelectionPreview:
    start, end = selection_range(anchor, current, unit)
    blocked = blocked_units(index, start, end, unit)
    return SelectionPreview(start=start, end=end, valid=not blocked, blocked_units=blocked)


def preview_selection(db: Session, resource_id: str, anchor: datetime, current: datetime,
                      unit: Optional[timedelta] = None) -> SelectionPreview:
    unit = unit or timedelta(minutes=settings.GRID_UNIT_MINUTES)
    start, end = selection_range(anchor, current, unit)
    index = IntervalIndex.from_bookings(active_bookings(db, resource_id, start, end))
    return check_selection(index, anchor, current, unit)


def schedule_grid(db: Session, resource_id: str, from_date: date, days: Optional[int] = None,
                  unit: Optional[timedelta] = None) -> list[DaySchedule]:
    if days is None:
        days = settings.GRID_DAYS
    unit = unit or timedelta(minutes=settings.GRID_UNIT_MINUTES)
    _check_unit(unit)
    if days < 1:
        raise ValidationError("days must be at least 1")
    day_start, day_end = time(settings.GRID_START_HOUR), time(settings.GRID_END_HOUR)

    window_start = datetime.combine(from_date, day_start)
    window_end = datetime.combine(from_date + timedelta(days=days - 1), day_end)
    index = IntervalIndex.from_bookings(active_bookings(db, resource_id, window_start, window_end))

    schedule = []
    for offset in range(days):
        day = from_date + timedelta(days=offset)
        cursor = datetime.combine(day, day_start)
        close = datetime.combine(day, day_end)
        cells = []
        while cursor < close:
            cell_end = min(cursor + unit, close)
            hits = index.overlapping(cursor, cell_end)
            cells.append(GridCell(cursor, cell_end, bool(hits), hits[0].booking_id if hits else None))
            cursor += unit
        schedule.append(DaySchedule(day, cells))
    return schedule
