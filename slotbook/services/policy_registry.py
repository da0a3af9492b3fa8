"""
Per-resource policy lookup.

Each policy axis is a closed enum mapped to an explicit rule here, so the
preview path and the authoritative path cannot drift apart on an unknown key.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from slotbook.core.enums import ApprovalPolicy, BookingStatus, CancellationPolicy, PricingPolicy
from slotbook.core.errors import ValidationError
from slotbook.models.resource import Resource


@dataclass(frozen=True)
class ResourcePolicy:
    base_price_per_hour: Decimal
    pricing: PricingPolicy
    approval: ApprovalPolicy
    cancellation: CancellationPolicy


INITIAL_STATUS = {
    ApprovalPolicy.AUTO: BookingStatus.APPROVED,
    ApprovalPolicy.ADMIN_REQUIRED: BookingStatus.REQUESTED,
}

# cancellation key -> does a PAID booking cancelled at `now` get its money back
REFUND_RULES = {
    CancellationPolicy.FLEXIBLE: lambda start, now: now < start,
    CancellationPolicy.STRICT: lambda start, now: False,
}


def _parse(enum_cls, value, axis: str):
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"unknown {axis} policy: {value!r}") from None


def policy_for(resource: Resource) -> ResourcePolicy:
    return ResourcePolicy(
        base_price_per_hour=Decimal(resource.base_price_per_hour),
        pricing=_parse(PricingPolicy, resource.pricing_policy_key, "pricing"),
        approval=_parse(ApprovalPolicy, resource.approval_policy_key, "approval"),
        cancellation=_parse(CancellationPolicy, resource.cancellation_policy_key, "cancellation"),
    )


def initial_status(approval: ApprovalPolicy) -> BookingStatus:
    return INITIAL_STATUS[approval]


def refund_applies(cancellation: CancellationPolicy, status: BookingStatus, start: datetime, now: datetime) -> bool:
    """Only money actually taken can be refunded, so anything but PAID never qualifies."""
    if status != BookingStatus.PAID:
        return False
    return REFUND_RULES[cancellation](start, now)
