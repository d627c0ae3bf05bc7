"""Attach a single local file to a track."""

from __future__ import annotations

from pathlib import Path

import click

from offline_player.cli import EXIT_STORAGE_ERROR, Context, pass_context
from offline_player.exceptions import StorageWriteFailure
from offline_player.utils.output import error, format_bytes, success, verbose


@click.command("attach")
@click.argument("track_id")
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option(
    "--mime",
    default=None,
    help="MIME type to store (default: guessed from the file name).",
)
@pass_context
def cli(ctx: Context, track_id: str, file: Path, mime: str | None) -> None:
    """Save FILE for offline playback of TRACK_ID.

    Replaces any file previously attached to the track.

    \b
    Examples:
      offline-player attach 4uLU6hMCjMI75M1A2tKUQC ~/Music/blue-monday.flac
    """
    store = ctx.open_store()
    try:
        replaced = store.has(track_id)
        record = store.put_file(track_id, file, mime=mime)
    except StorageWriteFailure as e:
        error(str(e), hint="Free some space or raise [store] quota_bytes.")
        raise SystemExit(EXIT_STORAGE_ERROR) from e
    finally:
        store.close()

    if replaced:
        verbose(f"Replaced previous file for {track_id}")
    if not ctx.quiet:
        size = format_bytes(record.size)
        success(f"Saved for offline ✓ {record.filename} ({size}, {record.mime})")
