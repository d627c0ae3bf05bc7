"""String normalization for track/file matching.

Comparisons are diacritic- and punctuation-insensitive: text is decomposed
(NFKD), everything that is not an ASCII letter or digit is dropped, and the
remainder is lowercased. "Café Déjà-Vu" and "cafe dejavu" both become
"cafedejavu".
"""

from __future__ import annotations

import re
import unicodedata

_NON_ASCII_ALNUM = re.compile(r"[^A-Za-z0-9]")
_EXTENSION = re.compile(r"\.[^.]+$")


def normalize(s: str | None) -> str:
    """Decompose, keep ASCII letters and digits only, lowercase."""
    if not s:
        return ""
    return _NON_ASCII_ALNUM.sub("", unicodedata.normalize("NFKD", s)).lower()


def strip_extension(filename: str) -> str:
    """Drop the last extension: "01 - song.mp3" -> "01 - song"."""
    return _EXTENSION.sub("", filename)


def normalize_filename(filename: str) -> str:
    """Normalize a filename with its extension removed."""
    return normalize(strip_extension(filename))


def normalize_isrc(isrc: str | None) -> str:
    """ISRCs are compared as lowercased raw strings, not normalized."""
    return (isrc or "").lower()
