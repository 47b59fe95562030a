"""Upload-date eligibility window for the monthly leaderboard."""

import calendar
from collections.abc import Sequence
from datetime import date
import re

from attrs import define

from top100.config import get_logger
from top100.domain.entities import MISSING_FILE_MTIME, TrackObservation

logger = get_logger(__name__).bind(service="ranking")

_LABEL_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def parse_label_month(label_month: str) -> date:
    """Parse "YYYY-MM" into the first day of that month."""
    match = _LABEL_MONTH.match(label_month)
    if not match:
        raise ValueError(f"Label month must look like YYYY-MM, got {label_month!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in label {label_month!r}")
    return date(year, month, 1)


def _shift_months(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + (first_of_month.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


@define(frozen=True, slots=True)
class UploadWindow:
    """Inclusive range of file modification timestamps, as strings."""

    start: str
    end: str

    @classmethod
    def for_label_month(cls, label_month: str, months: int) -> "UploadWindow":
        """Window from the first day ``months`` before the label month to its last day.

        For 2025-11 and 3 months: 2025-08-01 00:00:00 to 2025-11-30 23:59:59.
        """
        if months <= 0:
            raise ValueError(f"Eligibility window needs a positive month count, got {months}")
        label_date = parse_label_month(label_month)
        cutoff = _shift_months(label_date, months)
        last_day = calendar.monthrange(label_date.year, label_date.month)[1]
        return cls(
            start=f"{cutoff.isoformat()} 00:00:00",
            end=f"{label_date.replace(day=last_day).isoformat()} 23:59:59",
        )

    def contains(self, file_mtime: str | None) -> bool:
        return self.start <= (file_mtime or MISSING_FILE_MTIME) <= self.end


def filter_by_upload_window(
    tracks: Sequence[TrackObservation], label_month: str, months: int
) -> list[TrackObservation]:
    """Keep tracks whose file was modified inside the eligibility window.

    A month count of zero disables the filter and returns every track.
    """
    if months == 0:
        logger.info("Eligibility filter disabled, all matched tracks eligible")
        return list(tracks)

    window = UploadWindow.for_label_month(label_month, months)
    logger.debug(f"Upload eligibility window: {window.start} to {window.end}")

    eligible = []
    for track in tracks:
        if window.contains(track.file_mtime):
            eligible.append(track)
        else:
            logger.debug(
                f"Excluded (upload {track.file_mtime or MISSING_FILE_MTIME}): "
                f"{track.artist} - {track.title}"
            )

    logger.info(
        f"Eligibility filter excluded {len(tracks) - len(eligible)} tracks "
        f"uploaded outside the {months}-month window",
        eligible=len(eligible),
    )
    return eligible
