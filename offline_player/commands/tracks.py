"""Show a playlist's tracks and which of them have a local file."""

from __future__ import annotations

import click

from offline_player.cli import EXIT_REMOTE_ERROR, Context, pass_context
from offline_player.exceptions import NetworkFetchFailure, RemoteAuthError
from offline_player.utils.output import console, create_table, error, format_duration, info


@click.command("tracks")
@click.argument("playlist_id")
@click.option(
    "--missing",
    "-m",
    is_flag=True,
    default=False,
    help="Only show tracks without an attached file.",
)
@pass_context
def cli(ctx: Context, playlist_id: str, missing: bool) -> None:
    """List the tracks of PLAYLIST_ID with their offline status.

    \b
    Examples:
      offline-player tracks 37i9dQZF1DXcBWIGoYBM5M
      offline-player tracks 37i9dQZF1DXcBWIGoYBM5M --missing
    """
    client = ctx.spotify_client()
    try:
        tracks = client.get_playlist_tracks(playlist_id)
    except RemoteAuthError as e:
        error(str(e), hint="Refresh SPOTIFY_ACCESS_TOKEN and try again.")
        raise SystemExit(EXIT_REMOTE_ERROR) from e
    except NetworkFetchFailure as e:
        error(f"Could not fetch tracks: {e}")
        raise SystemExit(EXIT_REMOTE_ERROR) from e

    store = ctx.open_store()
    try:
        saved = store.saved_ids(t.id for t in tracks)
    finally:
        store.close()

    shown = [t for t in tracks if t.id not in saved] if missing else tracks
    if not shown:
        info("Every track has a local file." if missing else "Playlist is empty.")
        return

    table = create_table(title=f"{len(saved)} of {len(tracks)} tracks saved for offline")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Track", style="track.title")
    table.add_column("Artists", style="track.artist")
    table.add_column("Length", justify="right")
    table.add_column("Offline")
    table.add_column("ID", style="dim", no_wrap=True)
    for index, track in enumerate(tracks, start=1):
        if missing and track.id in saved:
            continue
        status = "[saved]✓ Saved[/saved]" if track.id in saved else "—"
        table.add_row(
            str(index),
            track.name,
            track.artists,
            format_duration(track.duration_seconds),
            status,
            track.id,
        )
    console.print(table)
