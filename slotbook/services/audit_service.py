from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotbook.core.enums import AuditAction
from slotbook.models.audit_log import AuditLog


def log_audit(db: Session, actor_user_id: str, action: AuditAction, entity_id: str, details: str,
              entity_type: str = "booking", now: Optional[datetime] = None) -> AuditLog:
    """Append an entry to the caller's unit of work. Entries are insert-only."""
    entry = AuditLog(
        actor_user_id=actor_user_id,
        action=action.value,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        created_at=now or datetime.now(),
    )
    db.add(entry)
    return entry


def list_audit(db: Session, action: Optional[str] = None, actor_user_id: Optional[str] = None,
               entity_id: Optional[str] = None) -> list[AuditLog]:
    """Entries oldest first."""
    stmt = select(AuditLog)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if actor_user_id:
        stmt = stmt.where(AuditLog.actor_user_id == actor_user_id)
    if entity_id:
        stmt = stmt.where(AuditLog.entity_id == entity_id)
    return list(db.execute(stmt.order_by(AuditLog.id)).scalars().all())
