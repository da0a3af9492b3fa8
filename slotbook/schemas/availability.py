from datetime import date, datetime
from pydantic import BaseModel
from typing import List, Optional

class SelectionPreviewOut(BaseModel):
    start: datetime
    end: datetime
    valid: bool
    blockedUnits: List[datetime] = []

class GridCellOut(BaseModel):
    start: datetime
    end: datetime
    occupied: bool
    bookingId: Optional[str] = None

class DayScheduleOut(BaseModel):
    day: date
    cells: List[GridCellOut]
