from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotbook.core.errors import NotFoundError
from slotbook.models.resource import Resource


def list_resources(db: Session, category: Optional[str] = None) -> list[Resource]:
    stmt = select(Resource)
    if category:
        stmt = stmt.where(Resource.category == category.upper())
    return list(db.execute(stmt.order_by(Resource.category, Resource.name)).scalars().all())


def get_resource(db: Session, resource_id: str) -> Resource:
    r = db.get(Resource, resource_id)
    if not r:
        raise NotFoundError(f"resource {resource_id} not found")
    return r
