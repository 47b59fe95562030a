"""Monthly leaderboard generation use case.

Scans the uploads tree, resolves every file against the catalog, filters
the matches by upload date and ranks the eligible ones. A single file's
failure (unreadable tags, exhausted catalog retries) counts it as
unmatched; the batch carries on.
"""

from datetime import date
from pathlib import Path
from statistics import fmean

from attrs import define, field

from top100.application.services import TrackMatcher
from top100.config import get_logger
from top100.domain.entities import (
    LocalTrackMetadata,
    MatchResult,
    RankedTrack,
    TrackObservation,
)
from top100.domain.errors import MetadataReadError, RequestFailed
from top100.domain.ranking import (
    RankingEngine,
    filter_by_upload_window,
    parse_label_month,
)
from top100.infrastructure.services import CsvReportWriter, FileScanner, TagReader

logger = get_logger(__name__).bind(service="rankings")


def current_label_month() -> str:
    return date.today().strftime("%Y-%m")


@define(frozen=True, slots=True)
class GenerateRankingsCommand:
    """Options for one leaderboard run."""

    label_month: str = field(factory=current_label_month)
    dry_run: bool = False
    limit: int | None = None

    def __attrs_post_init__(self) -> None:
        parse_label_month(self.label_month)
        if self.limit is not None and self.limit <= 0:
            raise ValueError(f"File limit must be positive, got {self.limit}")


@define(frozen=True, slots=True)
class RankingRunResult:
    """Outcome of a leaderboard run.

    ``observations`` holds every file that could be read, matched or not,
    for reporting; ``ranked`` is the truncated leaderboard.
    """

    label_month: str
    total_files: int
    matched: int
    unmatched: int
    eligible: int
    average_popularity: float
    observations: list[TrackObservation] = field(factory=list)
    ranked: list[RankedTrack] = field(factory=list)
    csv_path: Path | None = None
    errors: list[str] = field(factory=list)


@define(slots=True)
class GenerateRankingsUseCase:
    """Scan, match, filter, rank and report."""

    scanner: FileScanner
    tag_reader: TagReader
    matcher: TrackMatcher
    ranking_engine: RankingEngine
    report_writer: CsvReportWriter
    eligibility_months: int = 3

    def execute(self, command: GenerateRankingsCommand) -> RankingRunResult:
        logger.info(f"Label month: {command.label_month}")

        files = self.scanner.scan()
        if command.limit is not None and len(files) > command.limit:
            files = files[: command.limit]
            logger.info(f"Limited to {command.limit} files")

        total = len(files)
        logger.info(f"Processing {total} audio files")

        observations: list[TrackObservation] = []
        errors: list[str] = []
        for index, source in enumerate(files, start=1):
            logger.info("[{}/{}] Processing: {}", index, total, source.filename)
            try:
                metadata = self.tag_reader.read(source.file_path)
            except MetadataReadError as e:
                logger.error("Error processing {}: {!s}", source.filename, e)
                errors.append(f"{source.filename}: {e}")
                continue

            try:
                match = self._match(metadata)
            except RequestFailed as e:
                logger.error(
                    "Catalog lookup failed for {}: {!s}",
                    metadata.label,
                    e,
                    **e.as_dict(),
                )
                errors.append(f"{source.filename}: {e}")
                match = MatchResult.no_match()

            observations.append(
                TrackObservation(metadata=metadata, match=match, source=source)
            )

        matched_tracks = [obs for obs in observations if obs.is_matched]
        matched = len(matched_tracks)
        unmatched = total - matched
        logger.info(f"Matching complete: {matched} matched, {unmatched} unmatched")

        eligible = filter_by_upload_window(
            matched_tracks, command.label_month, self.eligibility_months
        )
        ranked = self.ranking_engine.rank(eligible)

        csv_path = None
        if command.dry_run:
            logger.info("Dry run: skipping CSV report")
        else:
            csv_path = self.report_writer.write(ranked, command.label_month)

        average = fmean(obs.popularity for obs in matched_tracks) if matched_tracks else 0.0

        return RankingRunResult(
            label_month=command.label_month,
            total_files=total,
            matched=matched,
            unmatched=unmatched,
            eligible=len(eligible),
            average_popularity=average,
            observations=observations,
            ranked=ranked,
            csv_path=csv_path,
            errors=errors,
        )

    def _match(self, metadata: LocalTrackMetadata) -> MatchResult:
        logger.debug("Artist: {}, Title: {}", metadata.artist, metadata.title)

        match = self.matcher.find_match(metadata)

        if match.is_match:
            logger.info(
                "Matched: {} - {} (popularity: {})",
                match.artist,
                match.title,
                match.popularity,
            )
        else:
            logger.info("No match found")

        return match
