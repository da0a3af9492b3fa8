import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotbook.core.enums import PaymentStatus
from slotbook.models.booking import Booking
from slotbook.models.payment import Payment

REFUND_METHOD = "REFUND"


def record_payment(db: Session, booking: Booking, method: str, now: datetime) -> Payment:
    p = Payment(
        id=str(uuid.uuid4()),
        booking_id=booking.id,
        method=method,
        amount=booking.price,
        status=PaymentStatus.PAID.value,
        created_at=now,
    )
    db.add(p)
    return p


def paid_total(db: Session, booking_id: str) -> Decimal:
    """Money actually taken for a booking, which may differ from its current price."""
    return sum(
        (Decimal(p.amount) for p in list_payments(db, booking_id) if p.status == PaymentStatus.PAID.value),
        Decimal("0.00"),
    )


def record_refund(db: Session, booking: Booking, amount: Decimal, now: datetime) -> Payment:
    p = Payment(
        id=str(uuid.uuid4()),
        booking_id=booking.id,
        method=REFUND_METHOD,
        amount=amount,
        status=PaymentStatus.REFUNDED.value,
        created_at=now,
    )
    db.add(p)
    return p


def list_payments(db: Session, booking_id: str) -> list[Payment]:
    stmt = select(Payment).where(Payment.booking_id == booking_id).order_by(Payment.created_at)
    return list(db.execute(stmt).scalars().all())
