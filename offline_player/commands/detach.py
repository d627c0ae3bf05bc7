"""Remove an attached file."""

from __future__ import annotations

import click

from offline_player.cli import EXIT_STORAGE_ERROR, Context, pass_context
from offline_player.exceptions import StorageError
from offline_player.utils.output import error, info, success


@click.command("detach")
@click.argument("track_ids", nargs=-1, required=True)
@pass_context
def cli(ctx: Context, track_ids: tuple[str, ...]) -> None:
    """Delete the local files attached to TRACK_IDS.

    \b
    Examples:
      offline-player detach 4uLU6hMCjMI75M1A2tKUQC
    """
    store = ctx.open_store()
    removed = 0
    try:
        for track_id in track_ids:
            if store.delete(track_id):
                removed += 1
            elif not ctx.quiet:
                info(f"Nothing attached for {track_id}")
    except StorageError as e:
        error(str(e))
        raise SystemExit(EXIT_STORAGE_ERROR) from e
    finally:
        store.close()

    if not ctx.quiet:
        success(f"Removed {removed} file(s)")
