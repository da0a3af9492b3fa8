from sqlalchemy import Integer, String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from slotbook.db.session import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    # Autoincrement id is the insertion order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_user_id: Mapped[str] = mapped_column(String(36), index=True)
    action: Mapped[str] = mapped_column(String(40), index=True)  # create, approve, reject, pay, cancel, admin_update, admin_delete
    entity_type: Mapped[str] = mapped_column(String(40), default="booking")
    entity_id: Mapped[str] = mapped_column(String(36), index=True)
    details: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
