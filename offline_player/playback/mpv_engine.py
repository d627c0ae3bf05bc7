"""Media engine backed by libmpv through python-mpv.

mpv plays from a path, so each loaded blob is written to a private
temporary file that lives until the next load or until the engine is
closed. Property observers fire on mpv's event thread and are handed to
the asyncio loop before they reach the listener.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import os
import tempfile
from pathlib import Path
from typing import Any

import mpv

from offline_player.playback.engine import MediaEventListener

logger = logging.getLogger(__name__)


def _suffix_for(filename: str, mime: str) -> str:
    suffix = Path(filename).suffix
    if suffix:
        return suffix
    return mimetypes.guess_extension(mime) or ""


class MpvEngine:
    """Audio-only mpv player implementing the MediaEngine protocol.

    Must be created from inside a running event loop unless ``loop`` is given.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._player = mpv.MPV(vo="null", video=False, ytdl=False, keep_open="yes")
        self._listeners: list[MediaEventListener] = []
        self._current_path: Path | None = None
        self._started = False
        self._load_token = 0

        self._player.observe_property("time-pos", self._handle_time_pos)
        self._player.observe_property("duration", self._handle_duration)
        self._player.observe_property("pause", self._handle_pause)
        self._player.observe_property("eof-reached", self._handle_eof)

    def subscribe(self, listener: MediaEventListener) -> None:
        self._listeners.append(listener)

    def _dispatch(self, method: str, *args: Any) -> None:
        def deliver() -> None:
            for listener in self._listeners:
                getattr(listener, method)(*args)

        self._loop.call_soon_threadsafe(deliver)

    # mpv event thread callbacks

    def _handle_time_pos(self, _name: str, value: float | None) -> None:
        if value is not None:
            self._dispatch("on_time_update", float(value))

    def _handle_duration(self, _name: str, value: float | None) -> None:
        self._dispatch("on_duration_change", float(value) if value is not None else 0.0)

    def _handle_pause(self, _name: str, value: bool | None) -> None:
        if not self._started or value is None:
            return
        self._dispatch("on_paused" if value else "on_playing")

    def _handle_eof(self, _name: str, value: bool | None) -> None:
        if value:
            self._dispatch("on_ended")

    # transport

    def _discard_temp(self) -> None:
        if self._current_path is not None:
            self._current_path.unlink(missing_ok=True)
            self._current_path = None

    async def load(self, data: bytes, mime: str, filename: str) -> None:
        """Write ``data`` to a temporary file and make it the current source.

        A load that finishes after a newer load or a stop has started is
        dropped and its temporary file removed.
        """
        self._load_token += 1
        token = self._load_token
        path = await asyncio.to_thread(self._write_temp, data, _suffix_for(filename, mime))
        if token != self._load_token:
            path.unlink(missing_ok=True)
            logger.debug("Dropped stale load of %s", filename)
            return
        self._player.stop()
        self._discard_temp()
        self._current_path = path
        self._started = False
        logger.debug("Loaded %s (%d bytes) into %s", filename, len(data), path)

    @staticmethod
    def _write_temp(data: bytes, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix="offline-player-", suffix=suffix)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return Path(name)

    async def play(self) -> None:
        if self._current_path is None:
            return
        if not self._started:
            self._player.play(str(self._current_path))
            self._started = True
        self._player.pause = False

    async def pause(self) -> None:
        self._player.pause = True

    def stop(self) -> None:
        self._load_token += 1
        self._player.stop()
        self._started = False
        self._discard_temp()

    def seek(self, position_seconds: float) -> None:
        self._player.seek(position_seconds, reference="absolute")

    def set_volume(self, volume: float) -> None:
        self._player.volume = max(0.0, min(1.0, volume)) * 100

    def close(self) -> None:
        self.stop()
        self._player.terminate()
