"""Remote playlist records shared across components."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Track:
    """A remote playlist entry. Read-only to this package."""

    id: str
    name: str
    artists: str
    duration_ms: int = 0
    isrc: str | None = None

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000.0


@dataclass(frozen=True, slots=True)
class Playlist:
    """A remote playlist summary."""

    id: str
    name: str
    tracks_href: str | None = None
