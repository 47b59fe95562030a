"""Track-related domain entities.

Immutable records passed between the scanner, tag reader, matcher and
ranking engine. Optional values are modelled as ``None``, never as missing
keys.
"""

from enum import StrEnum
from pathlib import Path

from attrs import define, field, validators

# Sort fallbacks for records without a date or modification time
MISSING_RELEASE_DATE = "1900-01-01"
MISSING_FILE_MTIME = "1900-01-01 00:00:00"


class MatchMethod(StrEnum):
    """How a catalog match was found."""

    ISRC = "isrc"
    ARTIST_TITLE = "artist_title"


class MatchStatus(StrEnum):
    """Outcome of resolving one local track."""

    OK = "ok"  # exact identifier match
    AUTO_PICKED = "auto_picked"  # fuzzy match above threshold
    NO_MATCH = "no_match"

    @property
    def is_match(self) -> bool:
        return self is not MatchStatus.NO_MATCH


@define(frozen=True, slots=True)
class LocalTrackMetadata:
    """Tag metadata read from one local audio file."""

    artist: str = field(validator=validators.instance_of(str))
    title: str = field(validator=validators.instance_of(str))
    isrc: str | None = field(default=None)
    duration_seconds: float | None = field(default=None)
    album: str | None = field(default=None)
    year: str | None = field(default=None)
    genre: str | None = field(default=None)

    @property
    def label(self) -> str:
        return f"{self.artist} - {self.title}"


@define(frozen=True, slots=True)
class SourceFile:
    """A local audio file discovered by the scanner."""

    file_path: Path
    source_url: str
    filename: str
    file_size: int
    file_mtime: str  # "YYYY-MM-DD HH:MM:SS", local time
    checksum: str


@define(frozen=True, slots=True)
class CatalogCandidate:
    """One track row returned by a catalog search."""

    catalog_id: str = field(validator=validators.instance_of(str))
    artist: str
    title: str
    duration_ms: int = 0
    popularity: int = field(
        default=0, validator=[validators.ge(0), validators.le(100)]
    )
    album_name: str | None = None
    release_date: str | None = None
    catalog_url: str | None = None
    preview_url: str | None = None

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000

    @property
    def label(self) -> str:
        return f"{self.artist} - {self.title}"


def _check_match_invariant(instance: "MatchResult", _attribute, _value) -> None:
    if instance.status.is_match and instance.catalog_id is None:
        raise ValueError(f"MatchResult with status {instance.status} needs a catalog_id")
    if not instance.status.is_match and instance.catalog_id is not None:
        raise ValueError("MatchResult with status no_match must not carry a catalog_id")


@define(frozen=True, slots=True)
class MatchResult:
    """Result of resolving one local track against the catalog.

    Accepted results (``ok``/``auto_picked``) always carry a catalog id;
    ``no_match`` results never do, but keep the best score and a label of the
    rejected candidate for diagnostics.
    """

    status: MatchStatus = field(validator=_check_match_invariant)
    matched_via: MatchMethod
    match_confidence: float = field(
        default=0.0, validator=[validators.ge(0.0), validators.le(1.0)]
    )
    candidates_found: int = 0
    catalog_id: str | None = None
    artist: str | None = None
    title: str | None = None
    album_name: str | None = None
    release_date: str | None = None
    popularity: int | None = None
    duration_ms: int | None = None
    catalog_url: str | None = None
    preview_url: str | None = None
    best_candidate_label: str | None = None

    @classmethod
    def accepted(
        cls,
        candidate: CatalogCandidate,
        *,
        status: MatchStatus,
        matched_via: MatchMethod,
        confidence: float,
        candidates_found: int,
    ) -> "MatchResult":
        """Build an accepted result populated from the chosen candidate."""
        return cls(
            status=status,
            matched_via=matched_via,
            match_confidence=confidence,
            candidates_found=candidates_found,
            catalog_id=candidate.catalog_id,
            artist=candidate.artist,
            title=candidate.title,
            album_name=candidate.album_name,
            release_date=candidate.release_date,
            popularity=candidate.popularity,
            duration_ms=candidate.duration_ms,
            catalog_url=candidate.catalog_url,
            preview_url=candidate.preview_url,
        )

    @classmethod
    def no_match(
        cls,
        *,
        matched_via: MatchMethod = MatchMethod.ARTIST_TITLE,
        confidence: float = 0.0,
        candidates_found: int = 0,
        best_candidate_label: str | None = None,
    ) -> "MatchResult":
        return cls(
            status=MatchStatus.NO_MATCH,
            matched_via=matched_via,
            match_confidence=confidence,
            candidates_found=candidates_found,
            best_candidate_label=best_candidate_label,
        )

    @property
    def is_match(self) -> bool:
        return self.status.is_match


@define(frozen=True, slots=True)
class TrackObservation:
    """A local file, its tags, and how it resolved against the catalog.

    Catalog values take precedence over tag values for display fields, since
    the matched catalog row is the canonical spelling.
    """

    metadata: LocalTrackMetadata
    match: MatchResult
    source: SourceFile | None = None

    @property
    def is_matched(self) -> bool:
        return self.match.is_match

    @property
    def popularity(self) -> int:
        return self.match.popularity if self.match.popularity is not None else 0

    @property
    def release_date(self) -> str | None:
        return self.match.release_date

    @property
    def file_mtime(self) -> str | None:
        return self.source.file_mtime if self.source else None

    @property
    def artist(self) -> str:
        return self.match.artist if self.match.artist is not None else self.metadata.artist

    @property
    def title(self) -> str:
        return self.match.title if self.match.title is not None else self.metadata.title

    @property
    def catalog_id(self) -> str | None:
        return self.match.catalog_id

    @property
    def isrc(self) -> str | None:
        return self.metadata.isrc

    @property
    def source_url(self) -> str | None:
        return self.source.source_url if self.source else None


@define(frozen=True, slots=True)
class RankedTrack:
    """An accepted observation with its 1-based competition rank."""

    rank: int = field(validator=validators.ge(1))
    observation: TrackObservation

    # Delegated read-only views used by reports
    @property
    def popularity(self) -> int:
        return self.observation.popularity

    @property
    def artist(self) -> str:
        return self.observation.artist

    @property
    def title(self) -> str:
        return self.observation.title

    @property
    def release_date(self) -> str | None:
        return self.observation.release_date

    @property
    def catalog_id(self) -> str | None:
        return self.observation.catalog_id

    @property
    def isrc(self) -> str | None:
        return self.observation.isrc

    @property
    def source_url(self) -> str | None:
        return self.observation.source_url
