from decimal import Decimal
from sqlalchemy import String, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from slotbook.db.session import Base

class Resource(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str] = mapped_column(String(40), index=True)  # STUDY_ROOM_SMALL, EQUIPMENT, STUDIO, ...

    base_price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    pricing_policy_key: Mapped[str] = mapped_column(String(20), default="DEFAULT")        # DEFAULT|PEAK_HOURS|WEEKEND|PEAK_WEEKEND
    approval_policy_key: Mapped[str] = mapped_column(String(20), default="AUTO")          # AUTO|ADMIN_REQUIRED
    cancellation_policy_key: Mapped[str] = mapped_column(String(20), default="FLEXIBLE")  # FLEXIBLE|STRICT

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
