"""Durable local store of attached audio files, keyed by remote track id.

Each remote track has at most one attached file. A second ``put`` for the
same track replaces the first in a single transaction, so a concurrent
``get`` sees either the old record or the new one, never a mix.
"""

from __future__ import annotations

import logging
import mimetypes
import threading
import weakref
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from offline_player.exceptions import StorageError, StorageWriteFailure
from offline_player.store.models import StoredFile
from offline_player.store.session import get_store_engine, store_session

logger = logging.getLogger(__name__)

DEFAULT_MIME = "audio/mpeg"


@dataclass(frozen=True, slots=True)
class LocalFileRecord:
    """A stored file as handed back to callers."""

    track_id: str
    filename: str
    mime: str
    data: bytes
    saved_at: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class StoredFileInfo:
    """Metadata of a stored file, without its payload."""

    track_id: str
    filename: str
    mime: str
    size: int
    saved_at: str | None = None


def guess_mime(filename: str) -> str:
    """Guess an audio MIME type from a filename, defaulting to audio/mpeg."""
    mime, _ = mimetypes.guess_type(filename)
    return mime or DEFAULT_MIME


class BlobStore:
    """SQLite-backed key-value store of track id -> audio file.

    Args:
        db_path: Location of the SQLite database file.
        quota_bytes: Optional cap on the total stored payload size. Writes
            that would exceed it are rejected with StorageWriteFailure.
    """

    def __init__(self, db_path: Path, quota_bytes: int | None = None) -> None:
        self.db_path = db_path
        self.quota_bytes = quota_bytes
        try:
            self._engine = get_store_engine(db_path)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Cannot open store at {db_path}: {e}") from e
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        # Per-key write locks, dropped once no writer holds them
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def _lock_for(self, track_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(track_id)
            if lock is None:
                lock = self._locks[track_id] = threading.Lock()
            return lock

    def close(self) -> None:
        """Dispose of pooled connections."""
        self._engine.dispose()

    def put(self, track_id: str, filename: str, mime: str, data: bytes) -> LocalFileRecord:
        """Store ``data`` for ``track_id``, replacing any existing record.

        Raises:
            StorageWriteFailure: If the database or the quota rejects the write.
        """
        saved_at = datetime.now(timezone.utc).isoformat()
        with self._lock_for(track_id):
            try:
                with store_session(self._sessions) as session:
                    if self.quota_bytes is not None:
                        self._check_quota(session, track_id, len(data))
                    session.merge(
                        StoredFile(
                            track_id=track_id,
                            filename=filename,
                            mime=mime or DEFAULT_MIME,
                            data=data,
                            size=len(data),
                            saved_at=saved_at,
                        )
                    )
            except SQLAlchemyError as e:
                logger.warning("Write for track %s rejected: %s", track_id, e)
                raise StorageWriteFailure(track_id, str(getattr(e, "orig", None) or e)) from e

        logger.debug("Stored %d bytes for track %s (%s)", len(data), track_id, filename)
        return LocalFileRecord(track_id, filename, mime or DEFAULT_MIME, data, saved_at)

    def _check_quota(self, session: Session, track_id: str, incoming: int) -> None:
        others = session.scalar(
            select(func.coalesce(func.sum(StoredFile.size), 0)).where(
                StoredFile.track_id != track_id
            )
        )
        if others + incoming > self.quota_bytes:
            raise StorageWriteFailure(
                track_id,
                f"quota exceeded ({others + incoming} of {self.quota_bytes} bytes)",
            )

    def put_file(self, track_id: str, path: Path, mime: str | None = None) -> LocalFileRecord:
        """Read a local file and store it for ``track_id``."""
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageWriteFailure(track_id, f"cannot read {path}: {e}") from e
        return self.put(track_id, path.name, mime or guess_mime(path.name), data)

    def get(self, track_id: str) -> LocalFileRecord | None:
        """Return the record for ``track_id``, or None when nothing is attached."""
        with store_session(self._sessions) as session:
            row = session.get(StoredFile, track_id)
            if row is None:
                return None
            return _to_record(row)

    def has(self, track_id: str) -> bool:
        with store_session(self._sessions) as session:
            found = session.scalar(
                select(StoredFile.track_id).where(StoredFile.track_id == track_id)
            )
            return found is not None

    def saved_ids(self, track_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``track_ids`` that have an attached file."""
        wanted = list(track_ids)
        if not wanted:
            return set()
        with store_session(self._sessions) as session:
            rows = session.scalars(
                select(StoredFile.track_id).where(StoredFile.track_id.in_(wanted))
            )
            return set(rows)

    def list_records(self) -> list[LocalFileRecord]:
        """Return every stored record. Ordering is unspecified."""
        with store_session(self._sessions) as session:
            return [_to_record(row) for row in session.scalars(select(StoredFile))]

    def list_info(self) -> list[StoredFileInfo]:
        """Return metadata for every stored file, oldest first, without loading payloads."""
        stmt = select(
            StoredFile.track_id,
            StoredFile.filename,
            StoredFile.mime,
            StoredFile.size,
            StoredFile.saved_at,
        ).order_by(StoredFile.saved_at, StoredFile.track_id)
        with store_session(self._sessions) as session:
            return [StoredFileInfo(*row) for row in session.execute(stmt)]

    def delete(self, track_id: str) -> bool:
        """Remove the record for ``track_id``. Returns True if one existed."""
        with self._lock_for(track_id):
            try:
                with store_session(self._sessions) as session:
                    row = session.get(StoredFile, track_id)
                    if row is None:
                        return False
                    session.delete(row)
            except SQLAlchemyError as e:
                raise StorageError(f"Could not delete track {track_id}: {e}") from e
        logger.debug("Deleted stored file for track %s", track_id)
        return True

    def total_bytes(self) -> int:
        with store_session(self._sessions) as session:
            return session.scalar(select(func.coalesce(func.sum(StoredFile.size), 0)))


def _to_record(row: StoredFile) -> LocalFileRecord:
    return LocalFileRecord(
        track_id=row.track_id,
        filename=row.filename,
        mime=row.mime,
        data=bytes(row.data),
        saved_at=row.saved_at,
    )
