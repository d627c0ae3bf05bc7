"""Batch matching of local files against a remote playlist.

A single greedy pass over the tracks in playlist order. For each track the
pool of still-unassigned candidates is scanned in the order the files were
supplied, and the first candidate whose normalized keys contain the
track's normalized name or artist is taken and removed from the pool:

  filename: candidate filename contains track name or track artist
  tags:     candidate title contains track name, or candidate artist
            contains track artist
  isrc:     both sides carry an ISRC and the candidate's contains the track's
  both:     filename rule first, tags rule only if filename found nothing

An empty normalized name or artist is contained in every key, so such a
track takes the first candidate left in the pool.

There is no scoring and no backtracking. The result is meant to be shown as
a preview and corrected by hand, not taken as authoritative.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from offline_player.exceptions import InvalidMatchMode, MatchCancelled
from offline_player.matching.normalize import normalize, normalize_filename, normalize_isrc
from offline_player.models import Track

logger = logging.getLogger(__name__)


class MatchMode(enum.Enum):
    """Which signals a match run may use."""

    FILENAME = "filename"
    TAGS = "tags"
    ISRC = "isrc"
    BOTH = "both"


MATCH_MODES: tuple[str, ...] = tuple(m.value for m in MatchMode)


def parse_match_mode(value: str | MatchMode) -> MatchMode:
    """Convert an exact mode token into a MatchMode.

    Raises:
        InvalidMatchMode: For anything other than the four mode tokens.
    """
    if isinstance(value, MatchMode):
        return value
    try:
        return MatchMode(value)
    except ValueError:
        raise InvalidMatchMode(value, MATCH_MODES) from None


@dataclass(frozen=True, slots=True)
class Tags:
    """Embedded tag values; empty string when absent or unreadable."""

    title: str = ""
    artist: str = ""
    isrc: str = ""


EMPTY_TAGS = Tags()


@dataclass(frozen=True, slots=True)
class Candidate:
    """A user-supplied file plus its extracted tags and derived match keys.

    Build with :meth:`create` so the normalized keys are derived once.
    """

    path: Path
    filename: str
    tags: Tags
    normalized_filename: str
    normalized_title: str
    normalized_artist: str
    isrc: str

    @classmethod
    def create(cls, path: Path, tags: Tags = EMPTY_TAGS, filename: str | None = None) -> Candidate:
        name = filename if filename is not None else path.name
        return cls(
            path=path,
            filename=name,
            tags=tags,
            normalized_filename=normalize_filename(name),
            normalized_title=normalize(tags.title),
            normalized_artist=normalize(tags.artist),
            isrc=normalize_isrc(tags.isrc),
        )


@dataclass(frozen=True, slots=True)
class MatchEntry:
    """One track -> file assignment and the rule that produced it."""

    track_id: str
    candidate: Candidate
    signal: str  # "filename", "tags" or "isrc"


@dataclass(frozen=True, slots=True)
class MatchAssignment:
    """Result of one match run.

    Entries follow track order. Every candidate appears either in exactly
    one entry or in ``unassigned``.
    """

    mode: MatchMode
    entries: tuple[MatchEntry, ...] = ()
    unassigned: tuple[Candidate, ...] = ()
    unmatched_track_ids: tuple[str, ...] = ()

    def as_mapping(self) -> dict[str, Path]:
        """Return a fresh ``track_id -> file path`` mapping."""
        return {e.track_id: e.candidate.path for e in self.entries}

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class _TrackKeys:
    track_id: str
    name: str
    artist: str
    isrc: str

    @classmethod
    def of(cls, track: Track) -> _TrackKeys:
        return cls(
            track_id=track.id,
            name=normalize(track.name),
            artist=normalize(track.artists),
            isrc=normalize_isrc(track.isrc),
        )


def _filename_rule(c: Candidate, t: _TrackKeys) -> bool:
    return t.name in c.normalized_filename or t.artist in c.normalized_filename


def _tags_rule(c: Candidate, t: _TrackKeys) -> bool:
    return t.name in c.normalized_title or t.artist in c.normalized_artist


def _isrc_rule(c: Candidate, t: _TrackKeys) -> bool:
    return bool(c.isrc) and bool(t.isrc) and t.isrc in c.isrc


_Rule = Callable[[Candidate, _TrackKeys], bool]

_RULES: dict[MatchMode, tuple[tuple[str, _Rule], ...]] = {
    MatchMode.FILENAME: (("filename", _filename_rule),),
    MatchMode.TAGS: (("tags", _tags_rule),),
    MatchMode.ISRC: (("isrc", _isrc_rule),),
    MatchMode.BOTH: (("filename", _filename_rule), ("tags", _tags_rule)),
}


def _first_match(
    pool: list[Candidate], keys: _TrackKeys, rules: tuple[tuple[str, _Rule], ...]
) -> tuple[int, str] | None:
    for signal, rule in rules:
        for index, candidate in enumerate(pool):
            if rule(candidate, keys):
                return index, signal
    return None


def match(
    tracks: Sequence[Track],
    candidates: Iterable[Candidate],
    mode: str | MatchMode,
    *,
    cancelled: Callable[[], bool] | None = None,
) -> MatchAssignment:
    """Assign candidate files to tracks.

    Pure: neither input is mutated and the result depends only on the
    arguments. Tracks are processed in the given order and ties between
    candidates go to the one supplied first.

    Args:
        tracks: Remote tracks in playlist order.
        candidates: Local files with extracted tags, in supply order.
        mode: One of "filename", "tags", "isrc", "both".
        cancelled: Optional callable polled before each track.

    Returns:
        MatchAssignment with the entries and the leftovers.

    Raises:
        InvalidMatchMode: If ``mode`` is not a known token. Checked before
            any matching happens.
        MatchCancelled: If ``cancelled`` reports True mid-run.
    """
    match_mode = parse_match_mode(mode)
    rules = _RULES[match_mode]
    pool = list(candidates)
    entries: list[MatchEntry] = []
    unmatched: list[str] = []

    for track in tracks:
        if cancelled is not None and cancelled():
            raise MatchCancelled(f"Match run cancelled after {len(entries)} assignments")

        keys = _TrackKeys.of(track)
        found = _first_match(pool, keys, rules)
        if found is None:
            unmatched.append(track.id)
            continue

        index, signal = found
        candidate = pool.pop(index)
        entries.append(MatchEntry(track.id, candidate, signal))
        logger.debug("Matched %s -> %s via %s", track.id, candidate.filename, signal)

    logger.debug(
        "Match run (%s): %d assigned, %d tracks unmatched, %d files left",
        match_mode.value,
        len(entries),
        len(unmatched),
        len(pool),
    )
    return MatchAssignment(
        mode=match_mode,
        entries=tuple(entries),
        unassigned=tuple(pool),
        unmatched_track_ids=tuple(unmatched),
    )
