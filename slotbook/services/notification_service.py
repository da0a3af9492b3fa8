import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotbook.models.booking import Booking
from slotbook.models.notification import Notification


def notify_owner(db: Session, booking: Booking, message: str, now: datetime) -> Notification:
    n = Notification(
        id=str(uuid.uuid4()),
        user_id=booking.user_id,
        booking_id=booking.id,
        message=message,
        created_at=now,
    )
    db.add(n)
    return n


def notify_status_change(db: Session, booking: Booking, old_status, new_status, now: datetime) -> Notification:
    old = old_status.value if old_status is not None else "NEW"
    return notify_owner(db, booking, f"Booking {booking.id} status changed: {old} -> {new_status.value}", now)


def list_notifications(db: Session, user_id: str) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id)
    )
    return list(db.execute(stmt).scalars().all())
