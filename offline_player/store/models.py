"""SQLAlchemy ORM models for the offline blob store."""

from __future__ import annotations

from sqlalchemy import Integer, LargeBinary, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class StoreBase(DeclarativeBase):
    """Base class for store ORM models."""

    pass


class StoredFile(StoreBase):
    """Audio bytes attached to a single remote track."""

    __tablename__ = "files"

    track_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    mime: Mapped[str] = mapped_column(String(128), nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    saved_at: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<StoredFile(track_id='{self.track_id}', filename='{self.filename}')>"
