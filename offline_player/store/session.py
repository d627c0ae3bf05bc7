"""Store database engine and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, create_engine, text
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session, sessionmaker

from offline_player.store.models import StoreBase, StoredFile

STORE_DB_NAME = "offline-audio.db"

log = logging.getLogger(__name__)

# All ORM models for schema evolution
_ALL_MODELS = [StoredFile]


def get_default_store_path() -> Path:
    """Get the default store database path."""
    return Path.home() / ".local" / "share" / "offline-player" / STORE_DB_NAME


def get_store_engine(db_path: Path) -> Engine:
    """Create the SQLAlchemy engine for the store database.

    Creates the parent directory, missing tables and missing columns, and
    switches the database to WAL mode so readers never block on a writer.

    Args:
        db_path: Path to the SQLite file.

    Returns:
        SQLAlchemy engine for the store database.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={
            "timeout": 30,
            "check_same_thread": False,
        },
    )

    StoreBase.metadata.create_all(engine)
    _ensure_schema(engine)

    with engine.connect() as conn:
        conn.execute(text("PRAGMA journal_mode=WAL"))
        conn.commit()

    return engine


@contextmanager
def store_session(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Open a session that commits on success and rolls back on error.

    Args:
        factory: Session factory bound to the store engine.

    Yields:
        SQLAlchemy Session for the store database.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _ensure_schema(engine: Engine) -> None:
    """Auto-add missing columns to existing tables.

    Only additive changes are handled. A database written by an older
    version keeps its rows; new nullable or defaulted columns are appended.
    """
    inspector = sa_inspect(engine)
    existing_tables = set(inspector.get_table_names())

    for model in _ALL_MODELS:
        table_name = model.__tablename__
        if table_name not in existing_tables:
            continue

        existing_cols = {col["name"] for col in inspector.get_columns(table_name)}
        for column in model.__table__.columns:
            if column.name in existing_cols:
                continue
            col_type = column.type.compile(engine.dialect)
            nullable = "" if column.nullable else " NOT NULL"
            default = ""
            if column.server_default is not None:
                default = f" DEFAULT {column.server_default.arg}"
            ddl = f"ALTER TABLE {table_name} ADD COLUMN {column.name} {col_type}{nullable}{default}"
            with engine.begin() as conn:
                conn.execute(text(ddl))
            log.info("Schema evolution: added column %s.%s", table_name, column.name)
