"""Deterministic popularity ranking with competition rank numbers.

Ordering, highest first:
1. popularity, descending
2. release date string, descending (missing sorts as 1900-01-01)
3. file modification time string, descending (missing sorts as 1900-01-01 00:00:00)
4. artist, ascending, case-insensitive
5. title, ascending, case-insensitive

Dates are compared as strings, which matches chronological order only for
zero-padded ISO values; that is what the catalog and scanner produce.
"""

from collections.abc import Callable, Sequence
from functools import partial

from attrs import define, field
from toolz import compose_left

from top100.config import get_logger
from top100.domain.entities import (
    MISSING_FILE_MTIME,
    MISSING_RELEASE_DATE,
    RankedTrack,
    TrackObservation,
)
from top100.domain.errors import ConfigurationError

logger = get_logger(__name__).bind(service="ranking")

DEFAULT_TOP_N = 100

# Stable sorts applied least significant key first
_order_by_priority: Callable[[Sequence[TrackObservation]], list[TrackObservation]] = (
    compose_left(
        partial(sorted, key=lambda t: t.title.lower()),
        partial(sorted, key=lambda t: t.artist.lower()),
        partial(sorted, key=lambda t: t.file_mtime or MISSING_FILE_MTIME, reverse=True),
        partial(
            sorted, key=lambda t: t.release_date or MISSING_RELEASE_DATE, reverse=True
        ),
        partial(sorted, key=lambda t: t.popularity, reverse=True),
    )
)


def sort_for_ranking(tracks: Sequence[TrackObservation]) -> list[TrackObservation]:
    """Return ``tracks`` in leaderboard order without truncating.

    Tracks equal on every key keep their input order.
    """
    return _order_by_priority(tracks)


def assign_competition_ranks(tracks: Sequence[TrackObservation]) -> list[RankedTrack]:
    """Number an ordered list with competition ranks ("1224" ranking).

    A track shares its predecessor's rank only when their popularity is
    equal; otherwise its rank is its 1-based position.
    """
    ranked: list[RankedTrack] = []
    for position, track in enumerate(tracks, start=1):
        previous = ranked[-1] if ranked else None
        if previous is not None and previous.popularity == track.popularity:
            rank = previous.rank
        else:
            rank = position
        ranked.append(RankedTrack(rank=rank, observation=track))
    return ranked


def _validate_top_n(_instance, _attribute, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigurationError(f"top_n must be a positive integer, got {value!r}")


@define(frozen=True, slots=True)
class RankingEngine:
    """Produces the Top-N leaderboard from matched observations."""

    top_n: int = field(default=DEFAULT_TOP_N, validator=_validate_top_n)

    def rank(
        self, tracks: Sequence[TrackObservation], top_n: int | None = None
    ) -> list[RankedTrack]:
        """Sort, truncate and rank matched observations.

        Args:
            tracks: Observations whose match was accepted
            top_n: Override for this call; defaults to the engine's top_n

        Returns:
            At most ``top_n`` ranked tracks, best first

        Raises:
            ConfigurationError: If ``top_n`` is not a positive integer
            ValueError: If an unmatched observation is passed in
        """
        limit = self.top_n if top_n is None else top_n
        _validate_top_n(self, None, limit)

        unmatched = [t for t in tracks if not t.is_matched]
        if unmatched:
            raise ValueError(
                f"Cannot rank {len(unmatched)} unmatched tracks, "
                f"e.g. {unmatched[0].metadata.label!r}"
            )

        logger.info(f"Ranking {len(tracks)} tracks")
        ranked = assign_competition_ranks(sort_for_ranking(tracks)[:limit])
        logger.info(f"Generated Top {limit} rankings", ranked=len(ranked))
        return ranked
