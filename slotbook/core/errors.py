"""
Booking engine exceptions.

Every error carries the HTTP status it maps to and a short machine code, so the
API layer can render a specific message without a catch-all.
"""


class BookingError(Exception):
    """Base exception for the booking engine."""

    status_code = 400
    code = "booking_error"


class ValidationError(BookingError):
    """Malformed input, rejected before any side effect."""

    status_code = 400
    code = "validation_error"


class ConflictError(BookingError):
    """Requested range overlaps an active booking on the same resource."""

    status_code = 409
    code = "conflict"


class StateConflictError(BookingError):
    """Action not permitted from the booking's current status."""

    status_code = 409
    code = "state_conflict"


class StaleStateError(StateConflictError):
    """Booking status changed between read and write."""

    code = "stale_state"


class AuthorizationError(BookingError):
    """Actor lacks the role or ownership the action requires."""

    status_code = 403
    code = "forbidden"


class NotFoundError(BookingError):
    """Referenced resource or booking does not exist."""

    status_code = 404
    code = "not_found"


class StorageFailure(BookingError):
    """Underlying persistence unavailable; the current call made no changes."""

    status_code = 503
    code = "storage_failure"
