"""
Database engine/session management for the game reviews backend.

Connection string resolution order:
1) DATABASE_URL env var if set (`postgres://` is accepted and rewritten to `postgresql://`).
2) Otherwise a local SQLite file next to the working directory.

Tables are created by `game_reviews.db.migrations.migrate()`, never implicitly on import.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger("game_reviews.db.session")

DEFAULT_DATABASE_URL = "sqlite:///./game_reviews.db"


def _normalize_database_url(raw: str) -> Optional[str]:
    """Return a SQLAlchemy URL for `raw`, or None when it is blank."""
    raw = raw.strip()
    if not raw:
        return None

    # Accept both "postgresql://" and "postgres://"
    if raw.startswith("postgres://"):
        raw = "postgresql://" + raw[len("postgres://") :]

    return raw


def _resolve_database_url() -> str:
    """Resolve the database URL using the env var or the SQLite fallback."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        parsed = _normalize_database_url(env_url)
        if parsed:
            return parsed
    return DEFAULT_DATABASE_URL


def make_engine(url: str, **kwargs: Any) -> Engine:
    """Create an engine, adding the connect args SQLite needs under FastAPI's threadpool."""
    connect_args: Dict[str, Any] = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, future=True, **kwargs)


# Create global engine/sessionmaker for dependency injection.
DATABASE_URL = _resolve_database_url()

_engine: Engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_engine() -> Engine:
    return _engine


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a SQLAlchemy session and ensures it's closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit(db: Session) -> None:
    """Commit `db`, rolling back and re-raising if the database rejects the change."""
    try:
        db.commit()
    except SQLAlchemyError:
        logger.exception("Commit failed, rolling back")
        db.rollback()
        raise


def flush(db: Session) -> None:
    """Flush pending changes, rolling back and re-raising if the database rejects them."""
    try:
        db.flush()
    except SQLAlchemyError:
        logger.exception("Flush failed, rolling back")
        db.rollback()
        raise


# PUBLIC_INTERFACE
def db_healthcheck(engine: Optional[Engine] = None) -> bool:
    """
    Perform a simple DB liveness check.

    Returns:
        bool: True if DB is reachable and responds to `SELECT 1`, else False.
    """
    try:
        with (engine or _engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning("Database healthcheck failed: %s", exc)
        return False
