#!/usr/bin/env python3
"""
Run migrations (same process, same DATABASE_URL), then seed, then uvicorn.
Ensures tables exist before seed and app start.
"""
import os
import sys

# 1) Wait for DB
import wait_for_db  # noqa: F401

# 2) Run migrations using the same settings as the app
from slotbook.core.config import settings
from slotbook.core.logging import configure_logging
from alembic.config import Config
from alembic import command

configure_logging(settings.LOG_LEVEL)

alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

# 3) Seed using an engine created *after* migrations
if settings.SEED_ON_START:
    from sqlalchemy.orm import sessionmaker
    from slotbook.db.session import make_engine
    seed_engine = make_engine(settings.DATABASE_URL)
    SeedSession = sessionmaker(autocommit=False, autoflush=False, bind=seed_engine)
    seed_db = SeedSession()
    from slotbook.seed import run as run_seed
    run_seed(seed_db)
    seed_db.close()
    seed_engine.dispose()

# 4) Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "slotbook.main:app", "--host", "0.0.0.0", "--port", "8000"],
)
