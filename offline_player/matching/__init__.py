"""Matching of user-supplied audio files against remote playlist tracks."""

from offline_player.matching.engine import (
    EMPTY_TAGS,
    MATCH_MODES,
    Candidate,
    MatchAssignment,
    MatchEntry,
    MatchMode,
    Tags,
    match,
    parse_match_mode,
)
from offline_player.matching.normalize import normalize, normalize_filename, normalize_isrc
from offline_player.matching.tags import (
    TagReadFailed,
    TagResult,
    TagsRead,
    build_candidate,
    build_candidates,
    read_tags,
    tags_or_empty,
)

__all__ = [
    "EMPTY_TAGS",
    "MATCH_MODES",
    "Candidate",
    "MatchAssignment",
    "MatchEntry",
    "MatchMode",
    "TagReadFailed",
    "TagResult",
    "Tags",
    "TagsRead",
    "build_candidate",
    "build_candidates",
    "match",
    "normalize",
    "normalize_filename",
    "normalize_isrc",
    "parse_match_mode",
    "read_tags",
    "tags_or_empty",
]
