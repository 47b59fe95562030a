"""Pure algorithms for string normalization and match scoring.

These functions hold no state and perform no I/O. They decide how closely a
local file's tags agree with a catalog search result.
"""

import re

from rapidfuzz.distance import Levenshtein

from .types import MatchEvidence

# Scoring weights
TITLE_WEIGHT = 0.5
ARTIST_WEIGHT = 0.4
DURATION_WEIGHT = 0.1
# Used when either duration is missing
TITLE_WEIGHT_NO_DURATION = 0.55
ARTIST_WEIGHT_NO_DURATION = 0.45

DEFAULT_STRICT_TOLERANCE_SEC = 5
DEFAULT_LOOSE_TOLERANCE_SEC = 10

# Collaboration markers and everything after them; word-anchored by whitespace
_FEATURE_PATTERNS = [
    re.compile(r"\s+feat\.?\s+.*", re.IGNORECASE),
    re.compile(r"\s+ft\.?\s+.*", re.IGNORECASE),
    re.compile(r"\s+featuring\s+.*", re.IGNORECASE),
]
_ARTIST_COLLABORATION_PATTERNS = [
    *_FEATURE_PATTERNS,
    re.compile(r"\s+with\s+.*", re.IGNORECASE),
    re.compile(r"\s+&\s+.*", re.IGNORECASE),
    re.compile(r"\s+and\s+.*", re.IGNORECASE),
    re.compile(r"\s+vs\.?\s+.*", re.IGNORECASE),
]

# Edition and version markers, applied in order
_TITLE_EDITION_PATTERNS = [
    re.compile(r"\s*-?\s*(remastered|remaster)\s*\d*", re.IGNORECASE),
    re.compile(r"\s*[\(\[](remastered|remaster).*?[\)\]]", re.IGNORECASE),
    re.compile(
        r"\s*[\(\[](live|acoustic|radio edit|single version|album version).*?[\)\]]",
        re.IGNORECASE,
    ),
    re.compile(r"\s*[\(\[](deluxe|bonus track|demo).*?[\)\]]", re.IGNORECASE),
    re.compile(r"\s*-\s*(live|acoustic|radio edit|single version)", re.IGNORECASE),
]

_BRACKETED = re.compile(r"\s*[\(\[].*?[\)\]]")
_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)
_PUNCTUATION = re.compile(r"[^\w\s\-]")
_WHITESPACE = re.compile(r"\s+")


def _strip_all(value: str, patterns: list[re.Pattern[str]]) -> str:
    for pattern in patterns:
        value = pattern.sub("", value)
    return value


def _finish(value: str) -> str:
    """Drop punctuation except hyphens, collapse whitespace, trim, lowercase."""
    value = _PUNCTUATION.sub("", value)
    value = _WHITESPACE.sub(" ", value)
    return value.strip().lower()


def normalize_artist(artist: str) -> str:
    """Canonicalize an artist name for comparison.

    Collaboration markers are stripped before punctuation, since the markers
    are recognized by the whitespace around them.

    >>> normalize_artist("The Beatles feat. Someone (Live)")
    'beatles'
    """
    value = _strip_all(artist, _ARTIST_COLLABORATION_PATTERNS)
    value = _BRACKETED.sub("", value)
    value = _LEADING_ARTICLE.sub("", value)
    return _finish(value)


def _normalize_title_once(title: str) -> str:
    value = _strip_all(title, _TITLE_EDITION_PATTERNS)
    value = _strip_all(value, _FEATURE_PATTERNS)
    value = _BRACKETED.sub("", value)
    return _finish(value)


def normalize_title(title: str) -> str:
    """Canonicalize a track title for comparison.

    Edition markers (remaster, live, radio edit, deluxe...) go first, then
    featured-artist credits, bracketed text, punctuation and casing. The
    result is a fixed point: normalizing it again returns it unchanged.

    >>> normalize_title("Hey Jude (Remastered 2015)")
    'hey jude'
    """
    value = _normalize_title_once(title)
    while True:
        again = _normalize_title_once(value)
        if again == value:
            return value
        value = again


def similarity(a: str, b: str) -> float:
    """Levenshtein similarity ratio in [0, 1], case-insensitive.

    Distances are counted in code points, so multi-byte text is compared
    character by character.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    max_length = max(len(a), len(b))
    distance = Levenshtein.distance(a.lower(), b.lower())
    return 1.0 - distance / max_length


def duration_match(
    duration1: float,
    duration2: float,
    strict_tolerance: float = DEFAULT_STRICT_TOLERANCE_SEC,
    loose_tolerance: float = DEFAULT_LOOSE_TOLERANCE_SEC,
) -> float:
    """Score duration agreement in seconds: 1.0, 0.5 or 0.0."""
    diff = abs(duration1 - duration2)
    if diff <= strict_tolerance:
        return 1.0
    if diff <= loose_tolerance:
        return 0.5
    return 0.0


def score_match(
    artist1: str,
    artist2: str,
    title1: str,
    title2: str,
    duration1: float | None = None,
    duration2: float | None = None,
    strict_tolerance: float = DEFAULT_STRICT_TOLERANCE_SEC,
    loose_tolerance: float = DEFAULT_LOOSE_TOLERANCE_SEC,
) -> MatchEvidence:
    """Compare two artist/title/duration triples and explain the score.

    Title counts 50%, artist 40% and duration 10%. When either duration is
    missing the duration term is dropped and the weights become 55% / 45%.
    """
    title_similarity = similarity(normalize_title(title1), normalize_title(title2))
    artist_similarity = similarity(normalize_artist(artist1), normalize_artist(artist2))

    if duration1 is not None and duration2 is not None:
        duration_score = duration_match(
            duration1, duration2, strict_tolerance, loose_tolerance
        )
        score = title_similarity * TITLE_WEIGHT + artist_similarity * ARTIST_WEIGHT
        score += duration_score * DURATION_WEIGHT
    else:
        duration_score = None
        score = (
            title_similarity * TITLE_WEIGHT_NO_DURATION
            + artist_similarity * ARTIST_WEIGHT_NO_DURATION
        )

    return MatchEvidence(
        title_similarity=title_similarity,
        artist_similarity=artist_similarity,
        duration_score=duration_score,
        score=score,
    )


def match_score(
    artist1: str,
    artist2: str,
    title1: str,
    title2: str,
    duration1: float | None = None,
    duration2: float | None = None,
    strict_tolerance: float = DEFAULT_STRICT_TOLERANCE_SEC,
    loose_tolerance: float = DEFAULT_LOOSE_TOLERANCE_SEC,
) -> float:
    """Overall match confidence in [0, 1]. See :func:`score_match`."""
    return score_match(
        artist1,
        artist2,
        title1,
        title2,
        duration1,
        duration2,
        strict_tolerance,
        loose_tolerance,
    ).score
