"""List files saved for offline playback."""

from __future__ import annotations

import click

from offline_player.cli import Context, pass_context
from offline_player.utils.output import console, create_table, format_bytes, info


@click.command("saved")
@pass_context
def cli(ctx: Context) -> None:
    """List every attached file in the offline store.

    \b
    Examples:
      offline-player saved
      offline-player --store ./other.db saved
    """
    store = ctx.open_store()
    try:
        records = store.list_info()
        total = store.total_bytes()
    finally:
        store.close()

    if not records:
        info("No files saved yet. Use 'attach' or 'match' to add some.")
        return

    table = create_table(title=f"{len(records)} files, {format_bytes(total)}")
    table.add_column("Track ID", style="dim", no_wrap=True)
    table.add_column("File", style="path")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Saved")
    for record in records:
        table.add_row(
            record.track_id,
            record.filename,
            record.mime,
            format_bytes(record.size),
            (record.saved_at or "")[:19].replace("T", " "),
        )
    console.print(table)
