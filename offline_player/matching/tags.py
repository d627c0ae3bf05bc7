"""Best-effort embedded tag extraction for candidate files.

Many user files carry no tags at all, so reading is allowed to fail: a
failure is reported as a :class:`TagReadFailed` value and degrades to empty
tags. The file stays eligible for filename matching.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import mutagen

from offline_player.exceptions import TagParseFailure
from offline_player.matching.engine import EMPTY_TAGS, Candidate, Tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TagsRead:
    tags: Tags

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class TagReadFailed:
    reason: str

    @property
    def ok(self) -> bool:
        return False


TagResult = TagsRead | TagReadFailed


def _first(values: Any) -> str:
    """Easy-tag values are lists of strings; take the first non-empty one."""
    if values is None:
        return ""
    if isinstance(values, str):
        return values.strip()
    for value in values:
        text = str(value).strip()
        if text:
            return text
    return ""


def _load_tags(path: Path) -> Tags:
    """Read title/artist/ISRC with mutagen's easy interface.

    Raises:
        TagParseFailure: If the file is unreadable, of an unknown format,
            or its tag block is corrupt.
    """
    try:
        audio = mutagen.File(path, easy=True)
    except (mutagen.MutagenError, OSError, ValueError) as e:
        raise TagParseFailure(path, str(e)) from e

    if audio is None:
        raise TagParseFailure(path, "unrecognized audio format")
    if audio.tags is None:
        raise TagParseFailure(path, "no tags")

    tags = audio.tags
    return Tags(
        title=_first(tags.get("title")),
        artist=_first(tags.get("artist")),
        isrc=_first(tags.get("isrc")),
    )


def read_tags(path: Path) -> TagResult:
    """Read embedded tags from ``path``; never raises for bad files."""
    try:
        return TagsRead(_load_tags(path))
    except TagParseFailure as e:
        logger.debug("%s", e)
        return TagReadFailed(e.reason)


def tags_or_empty(result: TagResult) -> Tags:
    """Collapse a tag result to a Tags value, empty on failure."""
    if isinstance(result, TagsRead):
        return result.tags
    return EMPTY_TAGS


def build_candidate(path: Path) -> Candidate:
    return Candidate.create(path, tags_or_empty(read_tags(path)))


async def build_candidates(paths: Iterable[Path]) -> list[Candidate]:
    """Extract tags for every file concurrently, keeping the supplied order."""
    return list(await asyncio.gather(*(asyncio.to_thread(build_candidate, p) for p in paths)))
