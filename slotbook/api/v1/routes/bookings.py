from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from slotbook.db.session import get_db
from slotbook.api.deps import get_current_actor, require_admin
from slotbook.core.identity import Actor
from slotbook.schemas.booking import BookingCreate, BookingOut, PaymentIn, CancellationOut
from slotbook.services import booking_service

router = APIRouter(tags=["bookings"])

@router.post("/bookings", response_model=BookingOut, status_code=201)
def create_booking(body: BookingCreate, db: Session = Depends(get_db),
                   actor: Actor = Depends(get_current_actor)):
    b = booking_service.create_booking(db, actor, body.resourceId, body.start, body.end)
    return BookingOut.of(b)

@router.get("/bookings/mine", response_model=list[BookingOut])
def list_my_bookings(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return [BookingOut.of(b) for b in booking_service.list_my_bookings(db, actor.user_id)]

@router.get("/bookings/pending", response_model=list[BookingOut])
def list_pending_bookings(db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return [BookingOut.of(b) for b in booking_service.list_pending_bookings(db)]

@router.post("/bookings/{booking_id}/approve", response_model=BookingOut)
def approve_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return BookingOut.of(booking_service.approve_booking(db, actor, booking_id))

@router.post("/bookings/{booking_id}/reject", response_model=BookingOut)
def reject_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    return BookingOut.of(booking_service.reject_booking(db, actor, booking_id))

@router.post("/bookings/{booking_id}/pay", response_model=BookingOut)
def pay_booking(booking_id: str, body: PaymentIn, db: Session = Depends(get_db),
                actor: Actor = Depends(get_current_actor)):
    return BookingOut.of(booking_service.pay_booking(db, actor, booking_id, body.method))

@router.post("/bookings/{booking_id}/cancel", response_model=CancellationOut)
def cancel_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    outcome = booking_service.cancel_booking(db, actor, booking_id)
    return CancellationOut(booking=BookingOut.of(outcome.booking), refunded=outcome.refunded, note=outcome.note)
