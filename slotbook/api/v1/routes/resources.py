from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from slotbook.db.session import get_db
from slotbook.api.deps import get_current_actor
from slotbook.core.identity import Actor
from slotbook.schemas.resource import ResourceOut
from slotbook.schemas.booking import BookingSlotOut, local_time
from slotbook.schemas.availability import SelectionPreviewOut, GridCellOut, DayScheduleOut
from slotbook.services.resource_service import list_resources, get_resource
from slotbook.services.availability_service import active_bookings, preview_selection, schedule_grid

router = APIRouter(tags=["resources"])

@router.get("/resources", response_model=list[ResourceOut])
def get_resources(category: str | None = None, db: Session = Depends(get_db),
                  actor: Actor = Depends(get_current_actor)):
    return [ResourceOut.of(r) for r in list_resources(db, category)]

@router.get("/resources/{resource_id}", response_model=ResourceOut)
def get_resource_detail(resource_id: str, db: Session = Depends(get_db),
                        actor: Actor = Depends(get_current_actor)):
    return ResourceOut.of(get_resource(db, resource_id))

@router.get("/resources/{resource_id}/availability", response_model=list[BookingSlotOut])
def query_availability(resource_id: str, start: datetime, end: datetime,
                       db: Session = Depends(get_db),
                       actor: Actor = Depends(get_current_actor)):
    items = active_bookings(db, resource_id, local_time(start), local_time(end))
    out = []
    for b in items:
        mine = b.user_id == actor.user_id
        out.append(BookingSlotOut(
            id=b.id,
            start=b.start_time,
            end=b.end_time,
            status=b.status,
            mine=mine,
            # other people's bookings show as occupied only
            userId=b.user_id if (mine or actor.is_admin) else None,
        ))
    return out

@router.get("/resources/{resource_id}/availability/preview", response_model=SelectionPreviewOut)
def preview_availability(resource_id: str, anchor: datetime, current: datetime,
                         unitMinutes: int | None = Query(None, ge=1, le=24 * 60),
                         db: Session = Depends(get_db),
                         actor: Actor = Depends(get_current_actor)):
    unit = timedelta(minutes=unitMinutes) if unitMinutes else None
    p = preview_selection(db, resource_id, local_time(anchor), local_time(current), unit)
    return SelectionPreviewOut(start=p.start, end=p.end, valid=p.valid, blockedUnits=p.blocked_units)

@router.get("/resources/{resource_id}/schedule", response_model=list[DayScheduleOut])
def get_schedule(resource_id: str, fromDate: date, days: int | None = Query(None, ge=1, le=31),
                 unitMinutes: int | None = Query(None, ge=1, le=24 * 60),
                 db: Session = Depends(get_db),
                 actor: Actor = Depends(get_current_actor)):
    unit = timedelta(minutes=unitMinutes) if unitMinutes else None
    return [
        DayScheduleOut(
            day=d.day,
            cells=[GridCellOut(start=c.start, end=c.end, occupied=c.occupied,
                               bookingId=c.booking_id) for c in d.cells],
        )
        for d in schedule_grid(db, resource_id, fromDate, days, unit)
    ]
