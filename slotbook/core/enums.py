"""
Closed value sets used across the engine.
"""

from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


# Statuses that occupy a resource's schedule
ACTIVE_STATUSES = frozenset({BookingStatus.REQUESTED, BookingStatus.APPROVED, BookingStatus.PAID})
TERMINAL_STATUSES = frozenset({BookingStatus.REJECTED, BookingStatus.CANCELLED, BookingStatus.REFUNDED})


class PricingPolicy(str, Enum):
    DEFAULT = "DEFAULT"
    PEAK_HOURS = "PEAK_HOURS"
    WEEKEND = "WEEKEND"
    PEAK_WEEKEND = "PEAK_WEEKEND"


class ApprovalPolicy(str, Enum):
    AUTO = "AUTO"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"


class CancellationPolicy(str, Enum):
    FLEXIBLE = "FLEXIBLE"
    STRICT = "STRICT"


class AuditAction(str, Enum):
    """Tags recorded on audit log entries."""

    CREATE = "create"
    APPROVE = "approve"
    REJECT = "reject"
    PAY = "pay"
    CANCEL = "cancel"
    ADMIN_UPDATE = "admin_update"
    ADMIN_DELETE = "admin_delete"


class PaymentStatus(str, Enum):
    PAID = "PAID"
    REFUNDED = "REFUNDED"
