"""Auto-match local files against a playlist and save the matches."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from offline_player.attach import AutoMatchResult, AutoMatchRun
from offline_player.cli import (
    EXIT_MATCH_ERROR,
    EXIT_REMOTE_ERROR,
    EXIT_STORAGE_ERROR,
    Context,
    pass_context,
)
from offline_player.exceptions import (
    InvalidMatchMode,
    MatchCancelled,
    NetworkFetchFailure,
    RemoteAuthError,
    StorageWriteFailure,
)
from offline_player.matching.engine import MATCH_MODES, MatchEntry
from offline_player.utils.output import (
    console,
    create_table,
    error,
    info,
    success,
    verbose,
    warning,
)


@click.command("match")
@click.argument("playlist_id")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option(
    "--mode",
    "-m",
    default=None,
    help=f"Match by {', '.join(MATCH_MODES)} (default from config, usually filename).",
)
@click.option(
    "--dry-run",
    "-n",
    is_flag=True,
    default=False,
    help="Show the matches without saving anything.",
)
@pass_context
def cli(
    ctx: Context,
    playlist_id: str,
    files: tuple[Path, ...],
    mode: str | None,
    dry_run: bool,
) -> None:
    """Match FILES against the tracks of PLAYLIST_ID and save them offline.

    Tracks are processed in playlist order; each takes the first remaining
    file whose name (or tags, or ISRC, depending on --mode) contains the
    track title or artist. Every file is used at most once. Review the
    result and fix mistakes with 'attach' and 'detach'.

    \b
    Modes:
      filename  file name contains track title or artist
      tags      embedded title/artist tags contain track title/artist
      isrc      embedded ISRC tag contains the track's ISRC
      both      filename first, then tags

    \b
    Examples:
      offline-player match 37i9dQZF1DXcBWIGoYBM5M ~/Music/*.mp3
      offline-player match 37i9dQZF1DXcBWIGoYBM5M ~/Music/*.flac --mode isrc --dry-run
    """
    config = ctx.require_config()
    token = mode if mode is not None else config.default_match_mode
    client = ctx.spotify_client()
    store = ctx.open_store()

    def _on_saved(entry: MatchEntry) -> None:
        verbose(f"Saved {entry.candidate.filename} -> {entry.track_id}")

    try:
        run = AutoMatchRun(
            client, store, playlist_id, files, token, dry_run=dry_run, on_saved=_on_saved
        )
        with console.status(f"Matching {len(files)} files ({run.mode.value})..."):
            result = asyncio.run(run.run())
    except InvalidMatchMode as e:
        error(str(e))
        raise SystemExit(EXIT_MATCH_ERROR) from e
    except RemoteAuthError as e:
        error(str(e), hint="Refresh SPOTIFY_ACCESS_TOKEN and try again.")
        raise SystemExit(EXIT_REMOTE_ERROR) from e
    except NetworkFetchFailure as e:
        error(f"Could not fetch playlist tracks, nothing was matched: {e}")
        raise SystemExit(EXIT_REMOTE_ERROR) from e
    except StorageWriteFailure as e:
        error(str(e), hint="Files matched before this one were saved.")
        raise SystemExit(EXIT_STORAGE_ERROR) from e
    except (MatchCancelled, KeyboardInterrupt) as e:
        warning("Match cancelled. Files saved before the interruption are kept.")
        raise SystemExit(EXIT_MATCH_ERROR) from e
    finally:
        store.close()

    if not ctx.quiet:
        _display_result(result)


def _display_result(result: AutoMatchResult) -> None:
    """Print the assignment preview and leftovers."""
    assignment = result.assignment
    names = {t.id: t for t in result.tracks}

    if assignment.entries:
        table = create_table(title=f"Matched {len(assignment)} of {len(result.tracks)} tracks")
        table.add_column("Track", style="track.title")
        table.add_column("Artists", style="track.artist")
        table.add_column("File", style="path")
        table.add_column("Via")
        for entry in assignment.entries:
            track = names[entry.track_id]
            table.add_row(track.name, track.artists, entry.candidate.filename, entry.signal)
        console.print(table)
    else:
        info("No files matched any track.")

    if assignment.unassigned:
        console.print(f"\n[bold]Unmatched files ({len(assignment.unassigned)}):[/bold]")
        for candidate in assignment.unassigned:
            console.print(f"  [path]{candidate.filename}[/path]")
        info("Attach these manually with: offline-player attach TRACK_ID FILE")

    if assignment.unmatched_track_ids:
        verbose(f"{len(assignment.unmatched_track_ids)} tracks still have no file.")

    if result.dry_run:
        info("Dry run: nothing was saved.")
    elif result.saved_track_ids:
        success(f"Bulk saved for offline ✓ ({len(result.saved_track_ids)} files)")
