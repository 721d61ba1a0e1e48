"""Engine and session wiring for the curation database.

Engines are cached per DSN, so switching ``CURATION_DATABASE_URL`` (tests do
this per tmp directory) gets a fresh pool while repeated calls with the same
DSN share one.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from curation.db.models import Base
from curation.settings import Settings, get_settings


def _connect_args(dsn: str) -> Dict[str, Any]:
    # SQLite connections are otherwise pinned to the creating thread
    if make_url(dsn).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


@lru_cache(maxsize=8)
def _engine_for(dsn: str) -> Engine:
    return create_engine(dsn, future=True, connect_args=_connect_args(dsn), pool_pre_ping=True)


@lru_cache(maxsize=8)
def _sessionmaker_for(dsn: str) -> sessionmaker[Session]:
    return sessionmaker(bind=_engine_for(dsn), expire_on_commit=False, autoflush=False, future=True)


def get_engine(settings: Settings | None = None) -> Engine:
    return _engine_for((settings or get_settings()).database_url)


def get_sessionmaker(settings: Settings | None = None) -> sessionmaker[Session]:
    return _sessionmaker_for((settings or get_settings()).database_url)


def ensure_schema(settings: Settings | None = None) -> None:
    """Create missing tables; safe to call repeatedly."""
    Base.metadata.create_all(bind=get_engine(settings))


@contextmanager
def session_scope(settings: Settings | None = None) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on any error."""
    with get_sessionmaker(settings)() as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        session.commit()
