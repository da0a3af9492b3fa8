from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from slotbook.core.config import settings


class Base(DeclarativeBase):
    pass


def make_engine(url: str):
    # SQLite connections are shared across request threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
