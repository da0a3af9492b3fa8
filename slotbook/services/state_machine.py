from slotbook.core.enums import AuditAction, BookingStatus
from slotbook.core.errors import StateConflictError

S = BookingStatus

# action -> statuses it may start from
ALLOWED_FROM = {
    AuditAction.APPROVE: {S.REQUESTED},
    AuditAction.REJECT: {S.REQUESTED},
    AuditAction.PAY: {S.APPROVED},
    AuditAction.CANCEL: {S.REQUESTED, S.APPROVED, S.PAID},
    AuditAction.ADMIN_UPDATE: {S.REQUESTED, S.APPROVED, S.PAID},
    AuditAction.ADMIN_DELETE: set(S),
}


def ensure_allowed(action: AuditAction, status: BookingStatus) -> None:
    if status not in ALLOWED_FROM[action]:
        raise StateConflictError(f"cannot {action.value} a booking that is {status.value}")
