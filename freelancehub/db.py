"""Engine, sessions and dialect helpers.

Services open one session per request and commit themselves. Writes that must
serialize rely on ``SELECT ... FOR UPDATE`` (PostgreSQL) together with
conditional UPDATEs and the contract version column, which also hold on
SQLite where row locks are not available.
"""
from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from freelancehub.config import get_settings
from freelancehub.models.base import Base

logger = logging.getLogger(__name__)

engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None


def _engine_kwargs(url: str) -> dict[str, object]:
    settings = get_settings()
    if make_url(url).get_backend_name() == "sqlite":
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_BUSY_TIMEOUT_SECONDS,
            }
        }
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


def init_engine(url: str | None = None) -> Engine:
    """Create the engine and session factory once; later calls reuse them."""

    global engine, SessionLocal
    if engine is None:
        url = url or get_settings().database_url
        engine = create_engine(url, echo=False, **_engine_kwargs(url))
        SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        logger.info(
            "Database engine ready",
            extra={"dialect": engine.dialect.name, "row_locks": supports_row_locks(engine)},
        )
    return engine


def get_engine() -> Engine:
    return engine if engine is not None else init_engine()


def get_sessionmaker() -> sessionmaker[Session]:
    if SessionLocal is None:
        init_engine()
    assert SessionLocal is not None
    return SessionLocal


def supports_row_locks(bind: Engine | None = None) -> bool:
    """SQLite compiles ``with_for_update()`` away; the other backends lock."""

    return (bind or get_engine()).dialect.name != "sqlite"


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def ping() -> bool:
    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))
    return True


def current_revision() -> str | None:
    """Alembic revision stamped in the database, ``None`` before the first upgrade."""

    with get_engine().connect() as conn:
        return conn.execute(text("SELECT version_num FROM alembic_version")).scalar()


def create_all() -> None:
    """Build the schema without Alembic; only for throwaway dev databases."""

    Base.metadata.create_all(bind=get_engine())


def close_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
        engine = None
        SessionLocal = None


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts: rolled back on error, always closed.

    Services commit their own work, so nothing is committed here.
    """

    session = get_sessionmaker()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


__all__ = [
    "SessionLocal",
    "engine",
    "init_engine",
    "get_engine",
    "get_sessionmaker",
    "supports_row_locks",
    "ping",
    "current_revision",
    "create_all",
    "close_engine",
    "session_scope",
    "get_db",
]
