import random
from datetime import timedelta

import pytest

from slotbook.core.errors import NotFoundError, ValidationError
from slotbook.services import booking_service as svc
from slotbook.services.availability_service import (
    active_bookings,
    check_selection,
    preview_selection,
    schedule_grid,
    selection_range,
)
from slotbook.services.conflict_detector import Interval, IntervalIndex, is_range_free

HOUR = timedelta(hours=1)


def test_active_bookings_in_window(db, make_resource, alice, bob, now, at):
    room = make_resource()
    early = svc.create_booking(db, alice, room.id, at(1, 9), at(1, 10), now=now)
    mid = svc.create_booking(db, bob, room.id, at(1, 11), at(1, 12), now=now)
    gone = svc.create_booking(db, bob, room.id, at(1, 13), at(1, 14), now=now)
    svc.cancel_booking(db, bob, gone.id, now=now)

    assert [b.id for b in active_bookings(db, room.id, at(1, 8), at(1, 18))] == [early.id, mid.id]
    # window edges are half-open too
    assert [b.id for b in active_bookings(db, room.id, at(1, 10), at(1, 11))] == []
    assert [b.id for b in active_bookings(db, room.id, at(1, 9, 59), at(1, 11, 1))] == [early.id, mid.id]


def test_active_bookings_errors(db, make_resource, now, at):
    room = make_resource()
    with pytest.raises(ValidationError):
        active_bookings(db, room.id, at(1, 12), at(1, 10))
    with pytest.raises(NotFoundError):
        active_bookings(db, "missing", at(1, 10), at(1, 12))


def test_selection_range_covers_both_units(at):
    assert selection_range(at(1, 10), at(1, 12), HOUR) == (at(1, 10), at(1, 13))
    # dragging backwards
    assert selection_range(at(1, 12), at(1, 10), HOUR) == (at(1, 10), at(1, 13))
    assert selection_range(at(1, 10), at(1, 10), HOUR) == (at(1, 10), at(1, 11))
    with pytest.raises(ValidationError):
        selection_range(at(1, 10), at(2, 10), HOUR)
    with pytest.raises(ValidationError):
        selection_range(at(1, 10), at(1, 11), timedelta(0))


def test_preview_selection_reports_blocked_units(db, make_resource, alice, now, at):
    room = make_resource()
    b = svc.create_booking(db, alice, room.id, at(1, 11), at(1, 12), now=now)

    ok = preview_selection(db, room.id, at(1, 9), at(1, 10), HOUR)
    assert ok.valid and ok.blocked_units == []
    assert (ok.start, ok.end) == (at(1, 9), at(1, 11))

    blocked = preview_selection(db, room.id, at(1, 9), at(1, 12), HOUR)
    assert not blocked.valid
    assert blocked.blocked_units == [at(1, 11)]

    svc.cancel_booking(db, alice, b.id, now=now)
    assert preview_selection(db, room.id, at(1, 9), at(1, 12), HOUR).valid


@pytest.mark.parametrize("seed", range(3))
def test_preview_agrees_with_admission_check(db, make_resource, alice, now, at, seed):
    rng = random.Random(seed)
    room = make_resource()
    for hour in rng.sample(range(8, 22), 5):
        svc.create_booking(db, alice, room.id, at(1, hour), at(1, hour, 30), now=now)

    for _ in range(30):
        a, c = rng.randrange(8, 22), rng.randrange(8, 22)
        preview = preview_selection(db, room.id, at(1, a), at(1, c), HOUR)
        assert preview.valid == is_range_free(db, room.id, preview.start, preview.end)


def test_check_selection_works_on_a_client_side_index(at):
    index = IntervalIndex([Interval("x", at(1, 14, 30), at(1, 15))])
    preview = check_selection(index, at(1, 13), at(1, 15), HOUR)
    assert preview.blocked_units == [at(1, 14)]


def test_schedule_grid(db, make_resource, alice, now, at):
    room = make_resource()
    b = svc.create_booking(db, alice, room.id, at(1, 9, 30), at(1, 10, 30), now=now)

    grid = schedule_grid(db, room.id, at(1, 0).date(), days=2, unit=HOUR)
    assert [d.day for d in grid] == [at(1, 0).date(), at(2, 0).date()]

    first_day = grid[0].cells
    assert first_day[0].start == at(1, 8)
    assert first_day[-1].end == at(1, 22)
    occupied = [(c.start, c.booking_id) for c in first_day if c.occupied]
    assert occupied == [(at(1, 9), b.id), (at(1, 10), b.id)]
    assert not any(c.occupied for c in grid[1].cells)


def test_schedule_grid_rejects_bad_arguments(db, make_resource, at):
    room = make_resource()
    with pytest.raises(ValidationError):
        schedule_grid(db, room.id, at(1, 0).date(), days=-1)
    with pytest.raises(ValidationError):
        schedule_grid(db, room.id, at(1, 0).date(), days=0)
    with pytest.raises(NotFoundError):
        schedule_grid(db, "missing", at(1, 0).date())
