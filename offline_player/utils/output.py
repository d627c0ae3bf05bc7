"""Rich console output helpers for offline-player."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

# Module-level verbosity flag (set by cli.py after argument parsing)
_verbose_enabled: bool = False

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "path": "blue underline",
        "track.artist": "bold",
        "track.title": "italic",
        "saved": "green",
    }
)

# Global console instances
console = Console(theme=THEME, stderr=False)
error_console = Console(theme=THEME, stderr=True)


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Configure module-level verbosity.

    Called from the CLI entry point after argument parsing. In debug mode
    library log records are also routed to stderr through rich.
    """
    global _verbose_enabled
    _verbose_enabled = verbose or debug  # debug implies verbose

    if debug:
        root = logging.getLogger("offline_player")
        if not any(isinstance(h, RichHandler) for h in root.handlers):
            root.addHandler(RichHandler(console=error_console, show_path=False))
        root.setLevel(logging.DEBUG)


def set_color(enabled: bool) -> None:
    """Enable or disable color on both console instances."""
    console.no_color = not enabled
    error_console.no_color = not enabled


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/info]")


def warning(message: str) -> None:
    """Print a warning message to stderr."""
    error_console.print(f"[warning]Warning:[/warning] {message}")


def error(message: str, hint: str | None = None) -> None:
    """Print an error message to stderr.

    Args:
        message: The error message.
        hint: Optional hint for resolution.
    """
    error_console.print(f"[error]Error:[/error] {message}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {hint}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/success]")


def verbose(message: str) -> None:
    """Print a message only when verbose mode is enabled."""
    if _verbose_enabled:
        console.print(f"[info]{message}[/info]")


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Create a styled table."""
    return Table(title=title, **kwargs)


def format_bytes(size: int) -> str:
    """Human readable byte count: 1536 -> '1.5 KiB'."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KiB", "MiB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} GiB"


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"
