"""Database configuration.

This module initializes the SQLAlchemy engine and declarative base, and
turns on foreign key enforcement for SQLite connections so the
``properties.owner_id`` reference is checked by the store itself.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from .core import get_settings


settings = get_settings()


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """Issue ``PRAGMA foreign_keys=ON`` on every new SQLite connection.

    Non-SQLite engines are left untouched.

    Args:
        target (Engine): Engine whose connections should enforce foreign keys.
    """

    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    future=True,
)
"""SQLAlchemy engine bound to the configured database URL."""

enable_sqlite_foreign_keys(engine)


Base = declarative_base()
"""Declarative base class for SQLAlchemy models."""


def create_tables(target: Engine) -> None:
    """
    Create the ``users`` and ``properties`` tables if they are missing.

    Schema management belongs to the storage side; this helper exists for
    development setups and tests.

    Args:
        target (Engine): Engine to create the tables on.
    """

    from . import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=target)
