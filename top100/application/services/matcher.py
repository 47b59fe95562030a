"""Track identity resolution against a music catalog.

For one local track, try an exact ISRC lookup first. Without an ISRC, or
when the lookup finds nothing, fall back to an artist/title search, score
every candidate and accept the best one only when it clears the
confidence threshold.
"""

from attrs import define, field

from top100.config import Settings, get_logger
from top100.domain.entities import (
    CatalogCandidate,
    LocalTrackMetadata,
    MatchMethod,
    MatchResult,
    MatchStatus,
)
from top100.domain.errors import ConfigurationError
from top100.domain.matching import CatalogSearchProtocol, MatchEvidence, score_match

logger = get_logger(__name__).bind(service="matching")

DEFAULT_CONFIDENCE_THRESHOLD = 0.85
DEFAULT_SEARCH_LIMIT = 10


def _validate_threshold(_instance, _attribute, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(
            f"confidence_threshold must be within [0, 1], got {value!r}"
        )


def _validate_search_limit(_instance, _attribute, value: int) -> None:
    if value <= 0:
        raise ConfigurationError(f"search_limit must be positive, got {value!r}")


@define(frozen=True, slots=True)
class TrackMatcher:
    """Resolves LocalTrackMetadata into a MatchResult.

    Holds no state between calls. Catalog errors (``RequestFailed``) are
    propagated; deciding whether they count as "unmatched" is the caller's
    business.
    """

    catalog: CatalogSearchProtocol
    confidence_threshold: float = field(
        default=DEFAULT_CONFIDENCE_THRESHOLD, validator=_validate_threshold
    )
    search_limit: int = field(default=DEFAULT_SEARCH_LIMIT, validator=_validate_search_limit)
    strict_duration_tolerance_sec: float = 5
    loose_duration_tolerance_sec: float = 10

    @classmethod
    def from_settings(
        cls, catalog: CatalogSearchProtocol, settings: Settings
    ) -> "TrackMatcher":
        return cls(
            catalog=catalog,
            confidence_threshold=settings.matching.confidence_threshold,
            search_limit=settings.matching.search_limit,
            strict_duration_tolerance_sec=settings.matching.strict_duration_tolerance_sec,
            loose_duration_tolerance_sec=settings.matching.loose_duration_tolerance_sec,
        )

    def find_match(self, metadata: LocalTrackMetadata) -> MatchResult:
        """Find the best catalog match for one local track.

        Args:
            metadata: Tags read from the local file

        Returns:
            ``ok`` for an ISRC match, ``auto_picked`` for a fuzzy match at or
            above the threshold, otherwise ``no_match``

        Raises:
            RequestFailed: If a catalog request fails
        """
        if metadata.isrc and metadata.isrc.strip():
            isrc_match = self._match_by_isrc(metadata.isrc.strip())
            if isrc_match is not None:
                return isrc_match

        return self._match_by_artist_title(metadata)

    def _match_by_isrc(self, isrc: str) -> MatchResult | None:
        """Exact identifier match; no scoring needed."""
        candidates = self.catalog.search_by_isrc(isrc)

        if not candidates:
            logger.debug(f"No ISRC match found for: {isrc}")
            return None

        if len(candidates) > 1:
            logger.warning(
                "Multiple ISRC matches found for: {}", isrc, candidates=len(candidates)
            )

        track = candidates[0]
        logger.info(f"ISRC exact match: {track.label}")

        return MatchResult.accepted(
            track,
            status=MatchStatus.OK,
            matched_via=MatchMethod.ISRC,
            confidence=1.0,
            candidates_found=len(candidates),
        )

    def _score(
        self, metadata: LocalTrackMetadata, candidate: CatalogCandidate
    ) -> MatchEvidence:
        return score_match(
            metadata.artist,
            candidate.artist,
            metadata.title,
            candidate.title,
            metadata.duration_seconds,
            candidate.duration_seconds,
            strict_tolerance=self.strict_duration_tolerance_sec,
            loose_tolerance=self.loose_duration_tolerance_sec,
        )

    def _match_by_artist_title(self, metadata: LocalTrackMetadata) -> MatchResult:
        """Fuzzy match with confidence scoring."""
        candidates = self.catalog.search_by_artist_title(
            metadata.artist, metadata.title, self.search_limit
        )

        if not candidates:
            logger.info(f"No match found for: {metadata.label}")
            return MatchResult.no_match()

        scored = []
        for candidate in candidates:
            evidence = self._score(metadata, candidate)
            logger.debug(
                "Candidate: {} (score: {:.3f})",
                candidate.label,
                evidence.score,
                **evidence.as_dict(),
            )
            scored.append((candidate, evidence))

        # max() returns the first maximal pair, so catalog order breaks ties
        best, best_evidence = max(scored, key=lambda pair: pair[1].score)
        best_score = best_evidence.score

        if best_score < self.confidence_threshold:
            logger.info(
                "Low confidence match ({:.3f}) for: {}",
                best_score,
                metadata.label,
                best_candidate=best.label,
            )
            return MatchResult.no_match(
                confidence=best_score,
                candidates_found=len(candidates),
                best_candidate_label=best.label,
            )

        logger.info(f"Auto-picked ({best_score:.3f}): {best.label}")
        return MatchResult.accepted(
            best,
            status=MatchStatus.AUTO_PICKED,
            matched_via=MatchMethod.ARTIST_TITLE,
            confidence=best_score,
            candidates_found=len(candidates),
        )
