from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from slotbook.db.session import get_db
from slotbook.api.deps import get_current_actor
from slotbook.core.identity import Actor
from slotbook.schemas.audit import NotificationOut
from slotbook.services.notification_service import list_notifications

router = APIRouter(tags=["me"])

@router.get("/me")
def me(actor: Actor = Depends(get_current_actor)):
    return {"id": actor.user_id, "role": actor.role.value}

@router.get("/me/notifications", response_model=list[NotificationOut])
def my_notifications(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return [
        NotificationOut(id=n.id, bookingId=n.booking_id, message=n.message, createdAt=n.created_at)
        for n in list_notifications(db, actor.user_id)
    ]
