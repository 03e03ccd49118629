"""
Database engine, session factory and unit-of-work helper.
"""

import logging
import uuid
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from mediahub.core.config import settings
from mediahub.core.exceptions import MediaHubError, StorageError

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_connect_args = {}
if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    _connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    connect_args=_connect_args,
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, operation: str, **context):
    """
    Run a block as a single unit of work.

    Commits on success. On failure the session is rolled back; domain errors
    propagate unchanged, driver errors are logged and re-raised as StorageError.

    Args:
        db: Active session
        operation: Short operation name for logs (e.g. "publication.create")
        **context: Extra fields attached to the error log
    """
    try:
        yield db
        db.commit()
    except MediaHubError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(
            f"Storage failure during {operation}",
            extra={"operation": operation, **context},
        )
        raise StorageError(operation=operation) from e


def generate_uuid() -> str:
    """Primary keys are UUID strings generated by the service."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the format stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_unique_violation(error: IntegrityError, column: str) -> bool:
    """
    True when ``error`` is a uniqueness failure on ``column``.

    Works on the SQLite ("UNIQUE constraint failed: publications.slug") and
    PostgreSQL ("duplicate key value violates unique constraint ...") messages.
    """
    message = str(getattr(error, "orig", error)).lower()
    return column in message and ("unique" in message or "duplicate" in message)
