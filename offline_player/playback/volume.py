"""Pointer-angle volume mapping for a circular volume control."""

from __future__ import annotations

import math


def clamp_volume(value: float) -> float:
    """Clamp to [0, 1]. NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def angle_to_volume(dx: float, dy: float) -> float:
    """Map a pointer offset from the ring centre to a volume.

    Screen coordinates: ``dy`` grows downwards. Straight up is 0, the
    value grows clockwise (right = 0.25, down = 0.5, left = 0.75) and
    approaches 1 just left of the top.
    """
    degrees = math.degrees(math.atan2(dy, dx))
    return ((degrees + 360 + 90) % 360) / 360
