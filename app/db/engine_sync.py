# app/db/engine_sync.py
"""
Synchronous SQLModel engine used by every service.
SQLite is the default store; any SQLAlchemy URL works through DATABASE_URL.
SQLite connections get WAL mode and foreign key enforcement.
"""
import os
from typing import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

DATABASE_URL_SYNC = settings.database_url
_is_sqlite = DATABASE_URL_SYNC.startswith("sqlite")

if _is_sqlite:
    _db_path = make_url(DATABASE_URL_SYNC).database
    if _db_path and _db_path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(_db_path)), exist_ok=True)

_connect_args = {"check_same_thread": False} if _is_sqlite else {}
sync_engine = create_engine(
    DATABASE_URL_SYNC, echo=settings.db_echo, connect_args=_connect_args
)


def configure_sqlite(engine: Engine) -> None:
    """Enable WAL and foreign keys on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


if _is_sqlite:
    configure_sqlite(sync_engine)


def get_sync_session() -> Generator[Session, None, None]:
    """
    Dependency for SYNC SQLModel session injection.
    One session per request; services commit or roll back on it.
    """
    with Session(sync_engine) as session:
        yield session


def create_sync_db_and_tables(engine: Engine = sync_engine) -> None:
    """Create all tables registered in SQLModel.metadata."""
    import app.models  # noqa: F401  (registers every table)

    SQLModel.metadata.create_all(engine)
