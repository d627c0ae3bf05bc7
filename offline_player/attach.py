"""Auto-match runs: fetch a playlist, match local files, store the results.

A run goes through four phases, each a suspension point:

  1. fetch the playlist's full track list
  2. read embedded tags from every supplied file
  3. match files to tracks (pure, see ``matching.engine``)
  4. write each assignment into the blob store, one put per track

The mode is validated when the run is created, before anything is fetched.
A fetch failure propagates and matching never runs on a partial track list.
``cancel()`` is honoured between phases, between tracks inside the
matcher, and before every write; writes already made stay in the store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from offline_player.exceptions import MatchCancelled
from offline_player.matching.engine import (
    MatchAssignment,
    MatchEntry,
    MatchMode,
    match,
    parse_match_mode,
)
from offline_player.matching.tags import build_candidates
from offline_player.models import Track
from offline_player.store.blobstore import BlobStore

logger = logging.getLogger(__name__)


class TrackSource(Protocol):
    def get_playlist_tracks(self, playlist_id: str) -> list[Track]: ...


@dataclass(frozen=True, slots=True)
class AutoMatchResult:
    """Outcome of a finished run."""

    tracks: tuple[Track, ...]
    assignment: MatchAssignment
    saved_track_ids: tuple[str, ...]
    dry_run: bool = False


class AutoMatchRun:
    """One cancellable auto-match run against a single playlist.

    Raises:
        InvalidMatchMode: From the constructor, for an unknown mode token.
    """

    def __init__(
        self,
        source: TrackSource,
        store: BlobStore,
        playlist_id: str,
        paths: Sequence[Path],
        mode: str | MatchMode,
        *,
        dry_run: bool = False,
        on_saved: Callable[[MatchEntry], None] | None = None,
    ) -> None:
        self.mode = parse_match_mode(mode)
        self.playlist_id = playlist_id
        self.paths = tuple(paths)
        self.dry_run = dry_run
        self._source = source
        self._store = store
        self._on_saved = on_saved
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _check(self, phase: str) -> None:
        if self._cancelled:
            raise MatchCancelled(f"Auto-match cancelled before {phase}")

    async def run(self) -> AutoMatchResult:
        self._check("fetching tracks")
        tracks = tuple(
            await asyncio.to_thread(self._source.get_playlist_tracks, self.playlist_id)
        )
        logger.info("Playlist %s has %d tracks", self.playlist_id, len(tracks))

        self._check("reading tags")
        candidates = await build_candidates(self.paths)

        self._check("matching")
        assignment = match(tracks, candidates, self.mode, cancelled=lambda: self._cancelled)
        logger.info(
            "Matched %d of %d tracks (%d files unassigned)",
            len(assignment),
            len(tracks),
            len(assignment.unassigned),
        )

        saved: list[str] = []
        if not self.dry_run:
            for entry in assignment.entries:
                self._check(f"saving {entry.candidate.filename}")
                await asyncio.to_thread(self._store.put_file, entry.track_id, entry.candidate.path)
                saved.append(entry.track_id)
                if self._on_saved is not None:
                    self._on_saved(entry)

        return AutoMatchResult(
            tracks=tracks,
            assignment=assignment,
            saved_track_ids=tuple(saved),
            dry_run=self.dry_run,
        )
