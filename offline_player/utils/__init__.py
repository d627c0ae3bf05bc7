"""Utility modules for offline-player."""

from offline_player.utils.output import (
    console,
    error,
    info,
    success,
    warning,
)

__all__ = [
    "console",
    "error",
    "info",
    "success",
    "warning",
]
