import logging
import uuid
from decimal import Decimal

from sqlalchemy import text, select
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from slotbook.db.session import SessionLocal
from slotbook.models.resource import Resource

logger = logging.getLogger(__name__)

# (name pattern, category, base rate, pricing, cancellation, approval, numbers)
CATALOG = [
    ("Study Room {n} (Small)", "STUDY_ROOM_SMALL", "8.00", "DEFAULT", "FLEXIBLE", "AUTO", range(1, 6)),
    ("Study Room {n} (Large)", "STUDY_ROOM_LARGE", "12.00", "PEAK_WEEKEND", "STRICT", "ADMIN_REQUIRED", range(6, 11)),
    ("Media Room {n}", "STUDY_ROOM_MEDIA", "15.00", "DEFAULT", "FLEXIBLE", "AUTO", range(11, 16)),
    ("Silent Room {n}", "STUDY_ROOM_SILENT", "10.00", "WEEKEND", "STRICT", "AUTO", range(16, 21)),
    ("MacBook Pro #{n}", "EQUIPMENT", "5.00", "DEFAULT", "FLEXIBLE", "AUTO", range(1, 11)),
    ("Sony A7S III #{n}", "EQUIPMENT", "15.00", "PEAK_WEEKEND", "STRICT", "ADMIN_REQUIRED", range(1, 6)),
    ("Lab Station A-{n}", "COMPUTER_LAB", "2.00", "DEFAULT", "STRICT", "ADMIN_REQUIRED", range(1, 16)),
    ("Recording Studio {n}", "STUDIO", "30.00", "PEAK_WEEKEND", "STRICT", "ADMIN_REQUIRED", range(1, 11)),
    ("Music Room {n}", "MUSIC_ROOM", "10.00", "PEAK_HOURS", "FLEXIBLE", "AUTO", range(101, 111)),
]


def ensure_resource(db: Session, name: str, category: str, rate: str, pricing: str, cancellation: str, approval: str) -> bool:
    exists = db.execute(select(Resource.id).where(Resource.name == name)).first()
    if exists:
        return False
    db.add(Resource(
        id=str(uuid.uuid4()),
        name=name,
        category=category,
        base_price_per_hour=Decimal(rate),
        pricing_policy_key=pricing,
        approval_policy_key=approval,
        cancellation_policy_key=cancellation,
    ))
    return True


def run(db=None):
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM resources LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("resources table not found yet, skipping seed (run alembic upgrade head)")
            return 0

        created = 0
        for pattern, category, rate, pricing, cancellation, approval, numbers in CATALOG:
            for n in numbers:
                if ensure_resource(db, pattern.format(n=n), category, rate, pricing, cancellation, approval):
                    created += 1
        db.commit()
        logger.info("seeded %d resources", created)
        return created
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    from slotbook.core.config import settings
    from slotbook.core.logging import configure_logging

    configure_logging(settings.LOG_LEVEL)
    run()
