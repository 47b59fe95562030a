"""Domain entities for track identity resolution and ranking."""

from .track import (
    MISSING_FILE_MTIME,
    MISSING_RELEASE_DATE,
    CatalogCandidate,
    LocalTrackMetadata,
    MatchMethod,
    MatchResult,
    MatchStatus,
    RankedTrack,
    SourceFile,
    TrackObservation,
)

__all__ = [
    "MISSING_FILE_MTIME",
    "MISSING_RELEASE_DATE",
    "CatalogCandidate",
    "LocalTrackMetadata",
    "MatchMethod",
    "MatchResult",
    "MatchStatus",
    "RankedTrack",
    "SourceFile",
    "TrackObservation",
]
