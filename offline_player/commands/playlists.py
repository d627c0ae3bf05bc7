"""List the user's remote playlists."""

from __future__ import annotations

import click

from offline_player.cli import EXIT_REMOTE_ERROR, Context, pass_context
from offline_player.exceptions import NetworkFetchFailure, RemoteAuthError
from offline_player.utils.output import console, create_table, error, info


@click.command("playlists")
@pass_context
def cli(ctx: Context) -> None:
    """List your Spotify playlists (metadata only).

    \b
    Examples:
      offline-player playlists
    """
    client = ctx.spotify_client()
    try:
        playlists = client.get_playlists()
    except RemoteAuthError as e:
        error(str(e), hint="Refresh SPOTIFY_ACCESS_TOKEN and try again.")
        raise SystemExit(EXIT_REMOTE_ERROR) from e
    except NetworkFetchFailure as e:
        error(f"Could not fetch playlists: {e}")
        raise SystemExit(EXIT_REMOTE_ERROR) from e

    if not playlists:
        info("No playlists found.")
        return

    table = create_table(title=f"Playlists ({len(playlists)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name")
    for playlist in playlists:
        table.add_row(playlist.id, playlist.name)
    console.print(table)
