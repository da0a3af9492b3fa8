import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slotbook.core.config import settings
from slotbook.core.enums import AuditAction, BookingStatus
from slotbook.core.errors import (
    AuthorizationError,
    BookingError,
    ConflictError,
    NotFoundError,
    StaleStateError,
    StorageFailure,
    ValidationError,
)
from slotbook.core.identity import Actor
from slotbook.models.booking import Booking
from slotbook.models.resource import Resource
from slotbook.services.audit_service import log_audit
from slotbook.services.conflict_detector import check_range, find_conflicts
from slotbook.services.locks import ResourceLocks
from slotbook.services.notification_service import notify_owner, notify_status_change
from slotbook.services.payment_service import paid_total, record_payment, record_refund
from slotbook.services.policy_registry import initial_status, policy_for, refund_applies
from slotbook.services.pricing_service import quote
from slotbook.services.resource_service import get_resource
from slotbook.services.state_machine import ensure_allowed

logger = logging.getLogger(__name__)

resource_locks = ResourceLocks(timeout=settings.RESOURCE_LOCK_TIMEOUT_SECONDS)


@dataclass(frozen=True)
class CancellationOutcome:
    booking: Booking
    refunded: bool
    note: str


@contextmanager
def _unit_of_work(db: Session):
    """Commit on success. On any failure roll back so nothing partial is left."""
    try:
        yield
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("booking store failure, changes rolled back")
        raise StorageFailure("booking store unavailable, no changes were saved") from e
    except Exception:
        db.rollback()
        raise


def _require_admin(actor: Actor, what: str) -> None:
    if not actor.is_admin:
        raise AuthorizationError(f"only admins can {what}")


def validate_new_range(start: datetime, end: datetime, now: datetime) -> None:
    check_range(start, end)
    if start.date() < now.date():
        raise ValidationError("bookings cannot start on a past day")
    if end <= now:
        raise ValidationError("requested range is already over")


def get_booking(db: Session, booking_id: str) -> Booking:
    b = db.get(Booking, booking_id)
    if not b:
        raise NotFoundError(f"booking {booking_id} not found")
    return b


def _lock_resource(db: Session, resource_id: str) -> Resource:
    # Row lock serialises admissions across processes; a no-op on SQLite
    r = db.execute(
        select(Resource).where(Resource.id == resource_id).with_for_update()
    ).scalar_one_or_none()
    if not r:
        raise NotFoundError(f"resource {resource_id} not found")
    return r


def _reject_conflicts(db: Session, resource_id: str, start: datetime, end: datetime,
                      exclude_booking_id: Optional[str] = None) -> None:
    conflicts = find_conflicts(db, resource_id, start, end, exclude_booking_id)
    if conflicts:
        logger.warning("admission refused on resource %s for %s - %s: overlaps %s",
                       resource_id, start.isoformat(), end.isoformat(), conflicts[0].booking_id)
        raise ConflictError(
            f"requested range overlaps booking {conflicts[0].booking_id} "
            f"({conflicts[0].start.isoformat()} - {conflicts[0].end.isoformat()})"
        )


def _compare_and_set(db: Session, booking: Booking, expected: BookingStatus, new: BookingStatus,
                     now: datetime, **values) -> None:
    result = db.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == expected.value)
        .values(status=new.value, updated_at=now, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning("stale write on booking %s: expected %s", booking.id, expected.value)
        raise StaleStateError(f"booking {booking.id} was modified concurrently, it is no longer {expected.value}")


def create_booking(db: Session, actor: Actor, resource_id: str, start: datetime, end: datetime,
                   now: Optional[datetime] = None) -> Booking:
    now = now or datetime.now()
    validate_new_range(start, end, now)
    # unknown ids never get a lock entry
    get_resource(db, resource_id)

    with resource_locks.hold(resource_id):
        with _unit_of_work(db):
            resource = _lock_resource(db, resource_id)
            policy = policy_for(resource)
            _reject_conflicts(db, resource_id, start, end)

            status = initial_status(policy.approval)
            booking = Booking(
                id=str(uuid.uuid4()),
                resource_id=resource_id,
                user_id=actor.user_id,
                start_time=start,
                end_time=end,
                status=status.value,
                price=quote(policy, start, end),
                created_at=now,
                updated_at=now,
            )
            db.add(booking)
            log_audit(db, actor.user_id, AuditAction.CREATE, booking.id,
                      f"Booking {booking.id} created on resource {resource_id} "
                      f"{start.isoformat()} - {end.isoformat()}, status {status.value}, price {booking.price}",
                      now=now)
            notify_status_change(db, booking, None, status, now)

    db.refresh(booking)
    logger.info("booking %s created on resource %s as %s", booking.id, resource_id, booking.status)
    return booking


def _transition(db: Session, actor: Actor, booking: Booking, action: AuditAction, target: BookingStatus,
                now: datetime, details: str) -> Booking:
    current = BookingStatus(booking.status)
    ensure_allowed(action, current)
    with _unit_of_work(db):
        _compare_and_set(db, booking, current, target, now)
        log_audit(db, actor.user_id, action, booking.id, details, now=now)
        notify_status_change(db, booking, current, target, now)
    db.refresh(booking)
    logger.info("booking %s %s -> %s by %s", booking.id, current.value, target.value, actor.user_id)
    return booking


def approve_booking(db: Session, actor: Actor, booking_id: str, now: Optional[datetime] = None) -> Booking:
    _require_admin(actor, "approve bookings")
    booking = get_booking(db, booking_id)
    return _transition(db, actor, booking, AuditAction.APPROVE, BookingStatus.APPROVED,
                       now or datetime.now(), f"Booking {booking.id} approved")


def reject_booking(db: Session, actor: Actor, booking_id: str, now: Optional[datetime] = None) -> Booking:
    _require_admin(actor, "reject bookings")
    booking = get_booking(db, booking_id)
    return _transition(db, actor, booking, AuditAction.REJECT, BookingStatus.REJECTED,
                       now or datetime.now(), f"Booking {booking.id} rejected")


def pay_booking(db: Session, actor: Actor, booking_id: str, method: str, now: Optional[datetime] = None) -> Booking:
    """Mark an approved booking paid once the payment provider has confirmed."""
    if not method or not method.strip():
        raise ValidationError("payment method is required")
    method = method.strip().upper()
    now = now or datetime.now()

    booking = get_booking(db, booking_id)
    if booking.user_id != actor.user_id:
        raise AuthorizationError("only the booking owner can pay for it")
    current = BookingStatus(booking.status)
    ensure_allowed(AuditAction.PAY, current)

    with _unit_of_work(db):
        _compare_and_set(db, booking, current, BookingStatus.PAID, now)
        record_payment(db, booking, method, now)
        log_audit(db, actor.user_id, AuditAction.PAY, booking.id,
                  f"Booking {booking.id} paid {booking.price} by {method}", now=now)
        notify_status_change(db, booking, current, BookingStatus.PAID, now)
    db.refresh(booking)
    logger.info("booking %s paid by %s", booking.id, method)
    return booking


def cancel_booking(db: Session, actor: Actor, booking_id: str, now: Optional[datetime] = None) -> CancellationOutcome:
    """Cancel a booking; a PAID booking under FLEXIBLE cancelled before its start is refunded.

    A cancellation that earns no refund is still a success, with a note saying so.
    """
    now = now or datetime.now()
    booking = get_booking(db, booking_id)
    if booking.user_id != actor.user_id and not actor.is_admin:
        raise AuthorizationError("only the booking owner or an admin can cancel it")
    current = BookingStatus(booking.status)
    ensure_allowed(AuditAction.CANCEL, current)

    resource = db.get(Resource, booking.resource_id)
    if not resource:
        raise NotFoundError(f"resource {booking.resource_id} not found")
    policy = policy_for(resource)

    refunded = refund_applies(policy.cancellation, current, booking.start_time, now)
    target = BookingStatus.REFUNDED if refunded else BookingStatus.CANCELLED
    # refund what was taken, not the current price
    refund_amount = paid_total(db, booking.id) if refunded else None
    if refunded:
        note = f"Full refund of {refund_amount} issued"
    elif current != BookingStatus.PAID:
        note = "No payment was taken, nothing to refund"
    elif now >= booking.start_time:
        note = "No refund applies: cancelled after the booking started"
    else:
        note = f"No refund applies under the {policy.cancellation.value} cancellation policy"

    with _unit_of_work(db):
        _compare_and_set(db, booking, current, target, now)
        if refunded:
            record_refund(db, booking, refund_amount, now)
        log_audit(db, actor.user_id, AuditAction.CANCEL, booking.id,
                  f"Booking {booking.id} cancelled ({current.value} -> {target.value}). {note}", now=now)
        notify_status_change(db, booking, current, target, now)
    db.refresh(booking)
    logger.info("booking %s cancelled by %s, refunded=%s", booking.id, actor.user_id, refunded)
    return CancellationOutcome(booking=booking, refunded=refunded, note=note)


def admin_update_booking(db: Session, actor: Actor, booking_id: str, new_start: datetime, new_end: datetime,
                         now: Optional[datetime] = None) -> Booking:
    """Move a non-terminal booking to a new range, re-checking conflicts and re-pricing."""
    _require_admin(actor, "edit bookings")
    now = now or datetime.now()
    validate_new_range(new_start, new_end, now)
    booking = get_booking(db, booking_id)

    with resource_locks.hold(booking.resource_id):
        with _unit_of_work(db):
            resource = _lock_resource(db, booking.resource_id)
            db.refresh(booking)
            current = BookingStatus(booking.status)
            ensure_allowed(AuditAction.ADMIN_UPDATE, current)
            _reject_conflicts(db, booking.resource_id, new_start, new_end, exclude_booking_id=booking.id)

            old_range = f"{booking.start_time.isoformat()} - {booking.end_time.isoformat()}"
            price = quote(policy_for(resource), new_start, new_end)
            _compare_and_set(db, booking, current, current, now,
                             start_time=new_start, end_time=new_end, price=price)
            log_audit(db, actor.user_id, AuditAction.ADMIN_UPDATE, booking.id,
                      f"Booking {booking.id} moved from {old_range} to "
                      f"{new_start.isoformat()} - {new_end.isoformat()}, price {price}", now=now)
            notify_owner(db, booking, f"Booking {booking.id} was rescheduled to "
                                      f"{new_start.isoformat()} - {new_end.isoformat()}", now)

    db.refresh(booking)
    logger.info("booking %s rescheduled by %s", booking.id, actor.user_id)
    return booking


def admin_delete_booking(db: Session, actor: Actor, booking_id: str, now: Optional[datetime] = None) -> None:
    """Remove a booking outright. The audit trail keeps a record of it."""
    _require_admin(actor, "delete bookings")
    now = now or datetime.now()
    booking = get_booking(db, booking_id)
    status = BookingStatus(booking.status)
    ensure_allowed(AuditAction.ADMIN_DELETE, status)

    with _unit_of_work(db):
        log_audit(db, actor.user_id, AuditAction.ADMIN_DELETE, booking.id,
                  f"Booking {booking.id} deleted (was {status.value} on resource {booking.resource_id} "
                  f"{booking.start_time.isoformat()} - {booking.end_time.isoformat()}, user {booking.user_id})",
                  now=now)
        notify_owner(db, booking, f"Booking {booking.id} was removed by an administrator", now)
        result = db.execute(delete(Booking).where(Booking.id == booking.id).execution_options(synchronize_session=False))
        if result.rowcount != 1:
            raise NotFoundError(f"booking {booking.id} not found")
        db.expunge(booking)
    logger.info("booking %s deleted by %s", booking_id, actor.user_id)


def list_my_bookings(db: Session, user_id: str) -> list[Booking]:
    stmt = select(Booking).where(Booking.user_id == user_id).order_by(Booking.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def list_pending_bookings(db: Session) -> list[Booking]:
    stmt = (
        select(Booking)
        .where(Booking.status == BookingStatus.REQUESTED.value)
        .order_by(Booking.created_at.asc())
    )
    return list(db.execute(stmt).scalars().all())
