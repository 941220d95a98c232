"""Engine, session factory and FastAPI session dependency."""
from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings
from app.models.base import Base

engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _engine_kwargs(url: str) -> dict[str, object]:
    if _is_sqlite(url):
        # Request handlers run in the threadpool; one connection may hop threads.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine() -> Engine:
    """Create the engine and session factory once; later calls return the same engine."""

    global engine, SessionLocal
    if engine is None:
        url = get_settings().database_url
        engine = create_engine(url, future=True, echo=False, **_engine_kwargs(url))
        if _is_sqlite(url):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        SessionLocal = sessionmaker(
            bind=engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )
    return engine


def get_engine() -> Engine:
    if engine is None:
        return init_engine()
    return engine


def get_sessionmaker() -> sessionmaker[Session]:
    if SessionLocal is None:
        init_engine()
    assert SessionLocal is not None  # for type-checkers
    return SessionLocal


def create_all() -> None:
    """Create every table from model metadata (dev/test only; production uses Alembic)."""

    Base.metadata.create_all(bind=get_engine())


def close_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
        engine = None
        SessionLocal = None


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts: commit on success, roll back on error, always close."""

    session = get_sessionmaker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Provide a database session for FastAPI dependencies."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "create_all",
    "get_db",
    "get_engine",
    "get_sessionmaker",
    "init_engine",
    "close_engine",
    "session_scope",
]
