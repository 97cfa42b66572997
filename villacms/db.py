import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

logger = logging.getLogger(__name__)

class Base(DeclarativeBase):
    pass

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def utcnow() -> datetime:
    """Current time as naive UTC, the form every stored datetime takes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


_INDEXES = [
    # composite index backs the per-room overlap search
    "CREATE INDEX IF NOT EXISTS ix_reservations_room_checkin_checkout ON reservations(room_id, check_in, check_out);",
    "CREATE INDEX IF NOT EXISTS ix_rooms_status ON rooms(status);",
    "CREATE INDEX IF NOT EXISTS ix_reservation_histories_room_checkout ON reservation_histories(room_id, check_out);",
]


def ensure_schema():
    """
    Create missing tables and the indexes used by the hot queries.
    Environments managed by Alembic get the same objects from the migrations;
    this keeps a fresh SQLite file usable without running them.
    Index creation is best-effort and never blocks startup.
    """
    from . import models  # noqa: F401  (registers the mappers on Base.metadata)

    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        for ddl in _INDEXES:
            try:
                conn.exec_driver_sql(ddl)
            except Exception as exc:
                logger.warning("Skipping index DDL %r: %s", ddl, exc)
