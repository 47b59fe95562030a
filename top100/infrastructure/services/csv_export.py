"""Excel-compatible CSV export of a ranked leaderboard."""

from collections.abc import Sequence
import csv
from pathlib import Path

from attrs import define, field

from top100.config import Settings, get_logger
from top100.domain.entities import RankedTrack

logger = get_logger(__name__).bind(service="report")

CSV_HEADER = (
    "rank",
    "artist",
    "title",
    "isrc",
    "catalog_id",
    "popularity",
    "release_date",
    "source_url",
)


def report_path(output_dir: Path, label_month: str) -> Path:
    """``<output_dir>/<month>/Top100_<month>.csv``."""
    return output_dir / label_month / f"Top100_{label_month}.csv"


def to_row(track: RankedTrack) -> list[str | int]:
    return [
        track.rank,
        track.artist or "",
        track.title or "",
        track.isrc or "",
        track.catalog_id or "",
        track.popularity,
        track.release_date or "",
        track.source_url or "",
    ]


@define(frozen=True, slots=True)
class CsvReportWriter:
    """Writes ranked tracks as RFC 4180 CSV with a UTF-8 BOM and CRLF endings."""

    output_dir: Path = field(converter=Path)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CsvReportWriter":
        return cls(output_dir=settings.report.output_dir)

    def write(self, tracks: Sequence[RankedTrack], label_month: str) -> Path:
        path = report_path(self.output_dir, label_month)
        logger.info(f"Generating CSV: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        # utf-8-sig emits the BOM Excel needs to detect the encoding
        with path.open("w", encoding="utf-8-sig", newline="") as handle:
            writer = csv.writer(
                handle, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL
            )
            writer.writerow(CSV_HEADER)
            writer.writerows(to_row(track) for track in tracks)

        logger.info(f"CSV generated: {len(tracks)} tracks")
        return path
