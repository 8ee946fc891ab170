from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings
from vocabstudy.db.models import Base

settings = get_settings()


def make_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on."""
    kwargs: dict = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # an in-memory database exists only on its one connection
            kwargs["poolclass"] = StaticPool
    new_engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


# Sync engine/session
engine = make_engine(settings.database_url, echo=settings.log_level == "DEBUG")
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_engine() -> Engine:
    """Get the database engine."""
    return engine


def init_db(target: Engine | None = None) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=target or engine)
    logger.info("Database tables initialized")


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()
