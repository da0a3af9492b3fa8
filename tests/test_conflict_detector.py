import random
from datetime import datetime, timedelta

import pytest

from slotbook.core.errors import ValidationError
from slotbook.services.booking_service import cancel_booking, create_booking, reject_booking
from slotbook.services.conflict_detector import (
    Interval,
    IntervalIndex,
    check_range,
    find_conflicts,
    is_range_free,
    overlaps,
)

T0 = datetime(2030, 1, 8, 0, 0)


def hours(h: float) -> datetime:
    return T0 + timedelta(hours=h)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((10, 12), (11, 13), True),
        ((10, 12), (12, 13), False),  # touching ends
        ((12, 13), (10, 12), False),
        ((10, 12), (9, 10), False),
        ((10, 12), (10.5, 11), True),  # containment
        ((10, 12), (9, 13), True),
        ((10, 12), (10, 12), True),
        ((10, 12), (13, 14), False),
    ],
)
def test_overlaps_is_half_open(a, b, expected):
    assert overlaps(hours(a[0]), hours(a[1]), hours(b[0]), hours(b[1])) is expected
    assert overlaps(hours(b[0]), hours(b[1]), hours(a[0]), hours(a[1])) is expected


def test_check_range_rejects_empty_and_reversed():
    with pytest.raises(ValidationError):
        check_range(hours(10), hours(10))
    with pytest.raises(ValidationError):
        check_range(hours(11), hours(10))
    with pytest.raises(ValidationError):
        check_range(None, hours(10))
    check_range(hours(10), hours(10.25))


def test_index_finds_overlaps_and_respects_exclusion():
    index = IntervalIndex([
        Interval("c", hours(14), hours(15)),
        Interval("a", hours(9), hours(10)),
        Interval("b", hours(10), hours(12)),
    ])
    assert len(index) == 3
    assert [i.booking_id for i in index.overlapping(hours(9.5), hours(10.5))] == ["a", "b"]
    assert index.overlapping(hours(12), hours(14)) == []
    assert index.is_free(hours(12), hours(14))
    assert not index.is_free(hours(11), hours(13))
    assert index.is_free(hours(11), hours(13), exclude_id="b")


def test_empty_index_is_free_everywhere():
    assert IntervalIndex().is_free(hours(0), hours(24))


@pytest.mark.parametrize("seed", range(5))
def test_index_agrees_with_brute_force(seed):
    rng = random.Random(seed)
    # Deliberately allow the stored intervals to overlap each other
    intervals = []
    for n in range(40):
        start = rng.randrange(0, 96)
        length = rng.randrange(1, 16)
        intervals.append(Interval(f"b{n}", hours(start / 4), hours((start + length) / 4)))
    index = IntervalIndex(intervals)

    for _ in range(200):
        start = rng.randrange(0, 100)
        length = rng.randrange(1, 12)
        q_start, q_end = hours(start / 4), hours((start + length) / 4)
        expected = {i.booking_id for i in intervals if overlaps(i.start, i.end, q_start, q_end)}
        assert {i.booking_id for i in index.overlapping(q_start, q_end)} == expected


def test_store_lookup_ignores_inactive_and_other_resources(db, make_resource, alice, admin, now, at):
    room = make_resource(approval="ADMIN_REQUIRED")
    other = make_resource()

    kept = create_booking(db, alice, room.id, at(1, 10), at(1, 11), now=now)
    rejected = create_booking(db, alice, room.id, at(1, 12), at(1, 13), now=now)
    reject_booking(db, admin, rejected.id, now=now)
    cancelled = create_booking(db, alice, room.id, at(1, 14), at(1, 15), now=now)
    cancel_booking(db, alice, cancelled.id, now=now)
    create_booking(db, alice, other.id, at(1, 16), at(1, 17), now=now)

    assert [c.booking_id for c in find_conflicts(db, room.id, at(1, 9), at(1, 18))] == [kept.id]
    assert is_range_free(db, room.id, at(1, 12), at(1, 13))
    assert is_range_free(db, room.id, at(1, 16), at(1, 17))
    assert is_range_free(db, room.id, at(1, 11), at(1, 12))
    assert not is_range_free(db, room.id, at(1, 10, 30), at(1, 12))
    assert is_range_free(db, room.id, at(1, 10), at(1, 11), exclude_booking_id=kept.id)
