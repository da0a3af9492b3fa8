from datetime import datetime
from pydantic import BaseModel

class AuditEntryOut(BaseModel):
    id: int
    actorUserId: str
    action: str
    entityType: str
    entityId: str
    details: str
    createdAt: datetime

class NotificationOut(BaseModel):
    id: str
    bookingId: str
    message: str
    createdAt: datetime
