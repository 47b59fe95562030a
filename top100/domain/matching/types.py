"""Pure domain types for match scoring."""

from typing import Any

from attrs import define


@define(frozen=True, slots=True)
class MatchEvidence:
    """Breakdown of how a match score was calculated.

    ``duration_score`` is None when either side had no duration, in which
    case the duration term was dropped and its weight redistributed.
    """

    title_similarity: float
    artist_similarity: float
    duration_score: float | None
    score: float

    @property
    def used_duration(self) -> bool:
        return self.duration_score is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "title_similarity": round(self.title_similarity, 3),
            "artist_similarity": round(self.artist_similarity, 3),
            "duration_score": self.duration_score,
            "score": round(self.score, 3),
        }
