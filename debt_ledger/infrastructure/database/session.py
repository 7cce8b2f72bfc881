"""Database session management with connection pooling"""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from debt_ledger.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets thread sharing and a bounded busy timeout"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.sqlite_busy_timeout_seconds,
            },
        )

    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }
    return create_engine(database_url, **options)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables that do not exist yet"""
    from debt_ledger.infrastructure.database.models import Base

    Base.metadata.create_all(bind=bind)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
