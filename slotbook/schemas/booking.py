from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, field_validator
from typing import Optional


def local_time(v: datetime) -> datetime:
    """All times share one implicit local zone; an offset, if sent, is dropped."""
    return v.replace(tzinfo=None) if v is not None and v.tzinfo is not None else v


class BookingCreate(BaseModel):
    resourceId: str
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def strip_offset(cls, v: datetime) -> datetime:
        return local_time(v)

class BookingReschedule(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def strip_offset(cls, v: datetime) -> datetime:
        return local_time(v)

class PaymentIn(BaseModel):
    method: str

class BookingOut(BaseModel):
    id: str
    resourceId: str
    userId: str
    start: datetime
    end: datetime
    status: str
    price: Decimal
    createdAt: datetime

    @classmethod
    def of(cls, b) -> "BookingOut":
        return cls(
            id=b.id,
            resourceId=b.resource_id,
            userId=b.user_id,
            start=b.start_time,
            end=b.end_time,
            status=b.status,
            price=b.price,
            createdAt=b.created_at,
        )

class CancellationOut(BaseModel):
    booking: BookingOut
    refunded: bool
    note: str

class BookingSlotOut(BaseModel):
    """A booking as shown on someone's schedule; owner hidden from other users."""
    id: str
    start: datetime
    end: datetime
    status: str
    mine: bool
    userId: Optional[str] = None
