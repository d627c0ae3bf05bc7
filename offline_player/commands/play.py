"""Play an attached track through mpv."""

from __future__ import annotations

import asyncio

import click
from rich.live import Live
from rich.progress_bar import ProgressBar
from rich.table import Table

from offline_player.cli import (
    EXIT_PLAYBACK_ERROR,
    EXIT_REMOTE_ERROR,
    Context,
    pass_context,
)
from offline_player.exceptions import MissingLocalFile, NetworkFetchFailure, PlaybackError
from offline_player.models import Track
from offline_player.playback.controller import PlaybackController, PlaybackSession, PlaybackState
from offline_player.store.blobstore import BlobStore
from offline_player.utils.output import console, error, format_duration, info

_REFRESH_SECONDS = 0.25

_STATE_ICONS = {
    PlaybackState.IDLE: "■",
    PlaybackState.LOADING: "…",
    PlaybackState.PLAYING: "▶",
    PlaybackState.PAUSED: "⏸",
}


def _finished(session: PlaybackSession) -> bool:
    if session.state is PlaybackState.IDLE:
        return True
    return (
        session.state is PlaybackState.PAUSED
        and session.duration_seconds > 0
        and session.position_seconds >= session.duration_seconds
    )


def _render(session: PlaybackSession, titles: dict[str, str]) -> Table:
    track_id = session.current_track_id or ""
    grid = Table.grid(padding=(0, 1))
    grid.add_column(width=2)
    grid.add_column()
    grid.add_column(width=30)
    grid.add_column(justify="right")
    position = format_duration(session.position_seconds)
    duration = format_duration(session.duration_seconds)
    grid.add_row(
        _STATE_ICONS[session.state],
        f"[track.title]{titles.get(track_id, track_id)}[/track.title]",
        ProgressBar(total=max(session.duration_seconds, 1.0), completed=session.position_seconds),
        f"{position} / {duration}",
    )
    return grid


async def _run_player(
    store: BlobStore,
    track_id: str,
    tracks: list[Track],
    volume: float,
    advance: bool,
) -> None:
    # Imported lazily so the rest of the CLI works without libmpv installed
    from offline_player.playback.mpv_engine import MpvEngine

    engine = MpvEngine()
    controller = PlaybackController(store, engine, tracks, volume=volume)
    titles = {t.id: f"{t.artists} - {t.name}" for t in tracks}
    try:
        await controller.play(track_id)
        with Live(_render(controller.session, titles), console=console, transient=True) as live:
            while True:
                await asyncio.sleep(_REFRESH_SECONDS)
                live.update(_render(controller.session, titles))
                if not _finished(controller.session):
                    continue
                current = controller.current_track_id
                if advance and current is not None and await _advance_past(controller, current):
                    continue
                break
    finally:
        controller.close()
        engine.close()


async def _advance_past(controller: PlaybackController, track_id: str) -> bool:
    """Play the first attached track after ``track_id``. Returns False at the end."""
    ids = [t.id for t in controller.tracks]
    if track_id not in ids:
        return False
    for candidate in ids[ids.index(track_id) + 1 :]:
        try:
            await controller.play(candidate)
            return True
        except MissingLocalFile:
            continue
    return False


@click.command("play")
@click.argument("track_id")
@click.option(
    "--playlist",
    "-p",
    "playlist_id",
    default=None,
    help="Playlist the track belongs to (shows titles, enables --advance).",
)
@click.option(
    "--volume",
    type=float,
    default=None,
    help="Volume between 0 and 1 (default from config).",
)
@click.option(
    "--advance",
    is_flag=True,
    default=False,
    help="Continue with the next attached track of --playlist when one ends.",
)
@pass_context
def cli(
    ctx: Context,
    track_id: str,
    playlist_id: str | None,
    volume: float | None,
    advance: bool,
) -> None:
    """Play the file attached to TRACK_ID.

    Playback runs entirely from the local store. Press Ctrl-C to stop.

    \b
    Examples:
      offline-player play 4uLU6hMCjMI75M1A2tKUQC
      offline-player play 4uLU6hMCjMI75M1A2tKUQC --playlist 37i9dQZF1DXcBWIGoYBM5M --advance
    """
    config = ctx.require_config()

    tracks: list[Track] = []
    if playlist_id is not None:
        client = ctx.spotify_client()
        try:
            tracks = client.get_playlist_tracks(playlist_id)
        except NetworkFetchFailure as e:
            error(str(e))
            raise SystemExit(EXIT_REMOTE_ERROR) from e

    store = ctx.open_store()
    try:
        asyncio.run(
            _run_player(
                store,
                track_id,
                tracks,
                config.volume if volume is None else volume,
                advance and bool(tracks),
            )
        )
    except MissingLocalFile as e:
        error(str(e), hint=f"Attach a file first: offline-player attach {track_id} FILE")
        raise SystemExit(EXIT_PLAYBACK_ERROR) from e
    except PlaybackError as e:
        error(str(e))
        raise SystemExit(EXIT_PLAYBACK_ERROR) from e
    except KeyboardInterrupt:
        info("Stopped.")
    finally:
        store.close()
