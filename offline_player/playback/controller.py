"""Playback state machine over locally attached files.

States move Idle -> Loading -> Playing <-> Paused, and back to Idle on
stop or when a track cannot be resolved. A newer ``play`` request always
wins: each load carries a generation number and a load that finishes
after a newer request started leaves the session untouched.

Position and duration are only ever written from media engine
notifications; the controller never polls the engine.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from offline_player.exceptions import MissingLocalFile, PlaybackError
from offline_player.models import Track
from offline_player.playback.engine import MediaEngine
from offline_player.playback.volume import clamp_volume
from offline_player.store.blobstore import BlobStore

logger = logging.getLogger(__name__)


class PlaybackState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(slots=True)
class PlaybackSession:
    """Ephemeral playback state. Mutated by PlaybackController only."""

    current_track_id: str | None = None
    state: PlaybackState = PlaybackState.IDLE
    position_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume: float = 1.0

    @property
    def progress(self) -> float:
        """Position as a fraction of duration, 0.0 while duration is unknown."""
        if self.duration_seconds <= 0:
            return 0.0
        return min(1.0, max(0.0, self.position_seconds / self.duration_seconds))


class PlaybackController:
    """Resolves track ids to stored files and drives a media engine.

    Args:
        store: Where attached files are looked up.
        engine: Host media engine. The controller subscribes to its events.
        tracks: The currently displayed track list, used by next/prev.
        volume: Initial volume, clamped to [0, 1].
    """

    def __init__(
        self,
        store: BlobStore,
        engine: MediaEngine,
        tracks: Iterable[Track] = (),
        volume: float = 1.0,
    ) -> None:
        self._store = store
        self._engine = engine
        self._tracks: tuple[Track, ...] = tuple(tracks)
        self._generation = 0
        self.session = PlaybackSession(volume=clamp_volume(volume))
        engine.subscribe(self)
        engine.set_volume(self.session.volume)

    @property
    def state(self) -> PlaybackState:
        return self.session.state

    @property
    def current_track_id(self) -> str | None:
        return self.session.current_track_id

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    def set_tracks(self, tracks: Iterable[Track]) -> None:
        """Replace the track list used by next/prev."""
        self._tracks = tuple(tracks)

    # -- transport ---------------------------------------------------------

    def _superseded(self, generation: int) -> bool:
        return generation != self._generation

    def _reset(self) -> None:
        self._engine.stop()
        s = self.session
        s.state = PlaybackState.IDLE
        s.current_track_id = None
        s.position_seconds = 0.0
        s.duration_seconds = 0.0

    async def play(self, track_id: str) -> None:
        """Load the stored file for ``track_id`` and start playing it.

        Raises:
            MissingLocalFile: Nothing is attached for the track. The session
                is left Idle.
            PlaybackError: The media engine failed to load or start.
        """
        self._generation += 1
        generation = self._generation
        self.session.state = PlaybackState.LOADING
        logger.debug("Loading track %s (load #%d)", track_id, generation)

        try:
            record = await asyncio.to_thread(self._store.get, track_id)
            if self._superseded(generation):
                logger.debug("Load #%d superseded before resolve finished", generation)
                return
            if record is None:
                raise MissingLocalFile(track_id)

            s = self.session
            s.current_track_id = track_id
            s.position_seconds = 0.0
            s.duration_seconds = 0.0

            try:
                await self._engine.load(record.data, record.mime, record.filename)
                if self._superseded(generation):
                    return
                await self._engine.play()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                raise PlaybackError(f"Could not play {record.filename}: {e}") from e

            if self._superseded(generation):
                return
            s.state = PlaybackState.PLAYING
        except BaseException:
            if not self._superseded(generation):
                self._reset()
            raise

    async def toggle(self) -> None:
        """Flip Playing <-> Paused. No-op unless a track is loaded."""
        s = self.session
        if s.current_track_id is None or s.state not in (
            PlaybackState.PLAYING,
            PlaybackState.PAUSED,
        ):
            return

        generation = self._generation
        if s.state is PlaybackState.PLAYING:
            await self._engine.pause()
            target = PlaybackState.PAUSED
        else:
            await self._engine.play()
            target = PlaybackState.PLAYING
        if not self._superseded(generation):
            s.state = target

    def seek(self, fraction: float) -> None:
        """Jump to ``fraction`` of the duration. No-op while duration is unknown."""
        s = self.session
        if s.current_track_id is None or s.duration_seconds <= 0 or math.isnan(fraction):
            return
        position = min(1.0, max(0.0, fraction)) * s.duration_seconds
        self._engine.seek(position)
        s.position_seconds = position

    def set_volume(self, volume: float) -> float:
        """Set the volume, clamping out-of-range input. Returns the value applied."""
        value = clamp_volume(volume)
        self.session.volume = value
        self._engine.set_volume(value)
        return value

    def _neighbour(self, offset: int) -> Track | None:
        current = self.session.current_track_id
        if current is None:
            return None
        for index, track in enumerate(self._tracks):
            if track.id == current:
                target = index + offset
                if 0 <= target < len(self._tracks):
                    return self._tracks[target]
                return None
        return None

    async def next(self) -> str | None:
        """Play the following track in the list. Returns its id, or None at the end."""
        track = self._neighbour(1)
        if track is None:
            return None
        await self.play(track.id)
        return track.id

    async def prev(self) -> str | None:
        """Play the preceding track in the list. Returns its id, or None at the start."""
        track = self._neighbour(-1)
        if track is None:
            return None
        await self.play(track.id)
        return track.id

    def stop(self) -> None:
        """Stop playback and discard any in-flight load."""
        self._generation += 1
        self._reset()

    def close(self) -> None:
        self.stop()

    # -- media engine notifications -----------------------------------------

    def on_time_update(self, position_seconds: float) -> None:
        if self.session.current_track_id is None or not math.isfinite(position_seconds):
            return
        self.session.position_seconds = max(0.0, position_seconds)

    def on_duration_change(self, duration_seconds: float) -> None:
        if self.session.current_track_id is None:
            return
        if not math.isfinite(duration_seconds) or duration_seconds < 0:
            duration_seconds = 0.0
        self.session.duration_seconds = duration_seconds

    def on_playing(self) -> None:
        if self.session.state is PlaybackState.PAUSED:
            self.session.state = PlaybackState.PLAYING

    def on_paused(self) -> None:
        if self.session.state is PlaybackState.PLAYING:
            self.session.state = PlaybackState.PAUSED

    def on_ended(self) -> None:
        # Some engines report a pause just before end of stream
        s = self.session
        if s.current_track_id is None or s.state not in (
            PlaybackState.PLAYING,
            PlaybackState.PAUSED,
        ):
            return
        s.state = PlaybackState.PAUSED
        if s.duration_seconds > 0:
            s.position_seconds = s.duration_seconds
