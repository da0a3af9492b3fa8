"""
Price computation.

Peak-window time is priced per bucket, prorated to the microsecond: the part
of a booking inside 18:00-22:00 local time is charged at PEAK_MULTIPLIER and the
rest at the base rate. The weekend factor applies to the whole booking when it
starts on a Saturday or Sunday. Price therefore never decreases as a booking
with a fixed start grows longer.
"""

from datetime import datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from slotbook.core.enums import PricingPolicy
from slotbook.models.resource import Resource
from slotbook.services.conflict_detector import check_range
from slotbook.services.policy_registry import ResourcePolicy, policy_for

PEAK_START = time(18, 0)
PEAK_END = time(22, 0)
PEAK_MULTIPLIER = Decimal("1.2")
WEEKEND_MULTIPLIER = Decimal("1.15")

CENTS = Decimal("0.01")
_MICROS_PER_HOUR = Decimal(3600 * 1_000_000)

# pricing key -> (peak surcharge, weekend surcharge)
_RULES = {
    PricingPolicy.DEFAULT: (False, False),
    PricingPolicy.PEAK_HOURS: (True, False),
    PricingPolicy.WEEKEND: (False, True),
    PricingPolicy.PEAK_WEEKEND: (True, True),
}


def _hours(delta: timedelta) -> Decimal:
    return Decimal(delta // timedelta(microseconds=1)) / _MICROS_PER_HOUR


def duration_hours(start: datetime, end: datetime) -> Decimal:
    return _hours(end - start)


def peak_hours(start: datetime, end: datetime) -> Decimal:
    """Hours of [start, end) falling inside a daily peak window."""
    inside = timedelta(0)
    day = start.date()
    while day <= end.date():
        window_start = datetime.combine(day, PEAK_START)
        window_end = datetime.combine(day, PEAK_END)
        overlap = min(end, window_end) - max(start, window_start)
        if overlap > timedelta(0):
            inside += overlap
        day += timedelta(days=1)
    return _hours(inside)


def is_weekend(moment: datetime) -> bool:
    return moment.weekday() >= 5


def quote(policy: ResourcePolicy, start: datetime, end: datetime) -> Decimal:
    check_range(start, end)
    peak_rule, weekend_rule = _RULES[policy.pricing]

    hours = duration_hours(start, end)
    billable = hours
    if peak_rule:
        peak = peak_hours(start, end)
        billable = (hours - peak) + peak * PEAK_MULTIPLIER
    if weekend_rule and is_weekend(start):
        billable *= WEEKEND_MULTIPLIER

    return (policy.base_price_per_hour * billable).quantize(CENTS, rounding=ROUND_HALF_UP)


def price_for(resource: Resource, start: datetime, end: datetime) -> Decimal:
    return quote(policy_for(resource), start, end)
