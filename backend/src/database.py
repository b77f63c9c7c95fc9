"""Database engine and session factory.

The engine owns the connection pool, which is the only process-wide state the
clearance service keeps. Every request gets its own session through get_db.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config import get_settings


def build_engine(url: str) -> Engine:
    """Create the engine for url.

    SQLite (tests, local development) is shared across FastAPI's worker
    threads; PostgreSQL gets a bounded pool.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False},
        )
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = build_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request.

    Commits are issued by the clearance service per operation, never here.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
