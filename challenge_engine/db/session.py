"""Database session management."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from challenge_engine.core.config import settings

logger = logging.getLogger(__name__)


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite run SAVEPOINTs inside a real transaction.

    The driver defers BEGIN until the first DML statement, which makes the
    outermost SAVEPOINT commit on release. Emitting BEGIN ourselves keeps
    nested transactions inside the session's unit of work.
    """

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str) -> Engine:
    """Create an engine with bounded waits for the configured backend."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )
        enable_sqlite_savepoints(engine)
        return engine

    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        pool_timeout=settings.db_pool_timeout_seconds,
        connect_args={"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"},
        echo=settings.debug,
    )
    logger.info(
        "database_engine_configured pool_timeout=%ss statement_timeout=%sms",
        settings.db_pool_timeout_seconds,
        settings.db_statement_timeout_ms,
    )
    return engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db():
    """Dependency for FastAPI to get DB session. Rolls back an unfinished unit of work."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
