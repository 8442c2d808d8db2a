"""Database session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storeroom.core.config import settings
from storeroom.core.exceptions import TransactionAbortedError

logger = logging.getLogger(__name__)

# Create engine - handle SQLite specially for check_same_thread
connect_args = {}
pool_config = {}

if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
    pool_config = {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }
else:
    # A stalled transaction is cancelled server-side and releases its row locks
    connect_args = {"options": f"-c statement_timeout={settings.statement_timeout_ms}"}
    pool_config = {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug and settings.log_level == "DEBUG",
    **pool_config,
)


def enable_sqlite_foreign_keys(target_engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(target_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Scope one all-or-nothing transaction on ``db``.

    Commits when the block exits normally. Any exception, including
    ``KeyboardInterrupt`` and task cancellation, rolls back every change made
    in the block before propagating. Store-level failures surface as
    ``TransactionAbortedError``; domain errors propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Transaction aborted by the store: {e.__class__.__name__}: {e}")
        raise TransactionAbortedError(str(e.__class__.__name__)) from e
    except BaseException:
        db.rollback()
        raise


def is_unique_violation(error: IntegrityError, column: str) -> bool:
    """True when ``error`` is a unique-constraint failure naming ``column``.

    SQLite reports ``UNIQUE constraint failed: table.column``; PostgreSQL
    reports ``duplicate key value ... Key (column)=(...)``.
    """
    message = str(error.orig).lower()
    return ("unique" in message or "duplicate key" in message) and column.lower() in message


# Type alias for dependency injection
DbSession = Annotated[Session, Depends(get_db)]
