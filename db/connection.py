"""
Database connection management for FRED Relay.

One engine per process, built lazily from DATABASE_URL. Without it, a SQLite
file under the data directory is used.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

DATABASE_FILENAME = "fred.db"
IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

# Global engine and session factory
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def get_data_dir() -> Path:
    """
    Directory holding the SQLite file.

    FRED_DATA_DIR wins; inside the container image (/app exists) it is the
    /data volume; otherwise db/data next to this module.
    """
    configured = os.environ.get("FRED_DATA_DIR")
    if configured:
        data_dir = Path(configured)
    elif Path("/app").exists():
        data_dir = Path("/data")
    else:
        data_dir = Path(__file__).parent / "data"

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        logger.error(f"Cannot create data directory {data_dir}: {e}")
        raise
    return data_dir


def get_database_url() -> str:
    """
    DATABASE_URL if set (postgres:// is rewritten to postgresql://),
    else a SQLite file in the data directory.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url
    return f"sqlite:///{get_data_dir() / DATABASE_FILENAME}"


def _build_engine(url: str) -> Engine:
    echo = os.environ.get("SQL_DEBUG", "").lower() == "true"

    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    # Flask serves on threads; SQLite connections must be shareable
    kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if url in IN_MEMORY_URLS:
        # Every session has to see the same in-memory database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine

    if _engine is None:
        url = get_database_url()
        safe_url = url.split("@")[-1] if "@" in url else url
        logger.info(f"Connecting to database: {safe_url}")
        _engine = _build_engine(url)

    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal

    if _SessionLocal is None:
        # Rows are handed to callers after the session closes
        _SessionLocal = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    return _SessionLocal


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Session scope: commit on success, roll back on error, always close."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create all tables. Safe to call repeatedly."""
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database initialized")


def reset_engine() -> None:
    """Dispose the engine and forget the session factory (used by tests)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
