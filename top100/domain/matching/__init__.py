"""String normalization and match scoring for catalog identification."""

from .algorithms import (
    duration_match,
    match_score,
    normalize_artist,
    normalize_title,
    score_match,
    similarity,
)
from .protocols import CatalogSearchProtocol
from .types import MatchEvidence

__all__ = [
    "CatalogSearchProtocol",
    "MatchEvidence",
    "duration_match",
    "match_score",
    "normalize_artist",
    "normalize_title",
    "score_match",
    "similarity",
]
