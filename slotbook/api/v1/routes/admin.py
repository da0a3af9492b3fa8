from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from slotbook.db.session import get_db
from slotbook.api.deps import require_admin
from slotbook.core.identity import Actor
from slotbook.schemas.booking import BookingOut, BookingReschedule
from slotbook.schemas.audit import AuditEntryOut
from slotbook.services import booking_service
from slotbook.services.audit_service import list_audit

router = APIRouter(tags=["admin"])

@router.patch("/admin/bookings/{booking_id}", response_model=BookingOut)
def admin_update_booking(booking_id: str, body: BookingReschedule, db: Session = Depends(get_db),
                         me: Actor = Depends(require_admin)):
    b = booking_service.admin_update_booking(db, me, booking_id, body.start, body.end)
    return BookingOut.of(b)

@router.delete("/admin/bookings/{booking_id}")
def admin_delete_booking(booking_id: str, db: Session = Depends(get_db), me: Actor = Depends(require_admin)):
    booking_service.admin_delete_booking(db, me, booking_id)
    return {"ok": True, "id": booking_id}

@router.get("/admin/audit", response_model=list[AuditEntryOut])
def get_audit(action: str | None = None, actorUserId: str | None = None, entityId: str | None = None,
              newestFirst: bool = False,
              db: Session = Depends(get_db), me: Actor = Depends(require_admin)):
    entries = list_audit(db, action=action, actor_user_id=actorUserId, entity_id=entityId)
    if newestFirst:
        entries.reverse()
    return [
        AuditEntryOut(id=e.id, actorUserId=e.actor_user_id, action=e.action, entityType=e.entity_type,
                      entityId=e.entity_id, details=e.details, createdAt=e.created_at)
        for e in entries
    ]
