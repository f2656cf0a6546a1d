from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bullpen.config.settings import settings

# Lazy initialization so importing the package never opens a connection
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")

        connect_args = {}
        if "sqlite" in settings.database_url.lower():
            connect_args = {"check_same_thread": False}
        else:
            connect_args = {"connect_timeout": 10, "application_name": "bullpen-engine"}

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        logger.info("Database engine initialized")
    return _engine


def get_engine() -> Engine:
    """Get or create the database engine (public API)."""
    return _get_engine()


def _get_session_local() -> sessionmaker[Session]:
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


def init_db() -> None:
    """Create all tables that do not exist yet."""
    from bullpen.db.models import Base

    Base.metadata.create_all(bind=_get_engine())
    logger.info("Database tables verified")


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get database session context manager.

    Commits when the block exits cleanly and rolls back on any exception,
    so a failed block never leaves a partial write behind.
    """
    session = _get_session_local()()
    try:
        yield session
        session.commit()
        logger.debug("Database session committed successfully")
    except Exception:
        logger.debug("Exception in database session, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
