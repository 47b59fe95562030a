"""Embedded tag reading for local audio files.

Tags are read through mutagen's "easy" interface so that ID3, MP4 and
Vorbis files expose the same keys (``artist``, ``title``, ``isrc``, ...).
"""

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
import re
from typing import Any, TypeAlias

from attrs import define, field
import mutagen

from top100.config import get_logger
from top100.domain.entities import LocalTrackMetadata
from top100.domain.errors import MetadataReadError

logger = get_logger(__name__).bind(service="tags")

UNKNOWN_ARTIST = "Unknown Artist"
ISRC_LENGTH = 12

_NON_ALPHANUMERIC = re.compile(r"[^A-Z0-9]")

Tags: TypeAlias = Mapping[str, Any]
FieldExtractor: TypeAlias = Callable[[Tags], str]


def cleanup(value: str | None) -> str:
    """Remove NUL bytes and surrounding whitespace."""
    return (value or "").replace("\0", "").strip()


def first_value(tags: Tags, key: str) -> str:
    """First value stored under ``key``, or an empty string."""
    try:
        values = tags.get(key)
    except (KeyError, ValueError):
        return ""
    if not values:
        return ""
    if isinstance(values, str):
        return values
    return str(values[0])


def tag_extractor(key: str) -> FieldExtractor:
    return lambda tags: cleanup(first_value(tags, key))


ARTIST_EXTRACTORS: tuple[FieldExtractor, ...] = (
    tag_extractor("artist"),
    tag_extractor("albumartist"),
)
TITLE_EXTRACTORS: tuple[FieldExtractor, ...] = (tag_extractor("title"),)


def extract_first(tags: Tags, extractors: Sequence[FieldExtractor]) -> str:
    """Run extractors in order and return the first non-empty result."""
    for extractor in extractors:
        if value := extractor(tags):
            return value
    return ""


def normalize_isrc(raw: str | None) -> str | None:
    """Uppercase and strip separators; reject anything not exactly 12 chars."""
    if not raw:
        return None
    isrc = _NON_ALPHANUMERIC.sub("", raw.upper())
    return isrc if len(isrc) == ISRC_LENGTH else None


def parse_filename(filename: str) -> tuple[str, str]:
    """Split "Artist - Title.ext" or "Artist-Title.ext" into its parts."""
    name = Path(filename).stem

    for separator in (" - ", "-"):
        if separator in name:
            artist, title = name.split(separator, 1)
            return artist.strip(), title.strip()

    return UNKNOWN_ARTIST, name


@define(frozen=True, slots=True)
class TagReader:
    """Reads ``LocalTrackMetadata`` from audio files.

    Attributes:
        artist_extractors: Extractors tried in order for the artist field
        title_extractors: Extractors tried in order for the title field
    """

    artist_extractors: tuple[FieldExtractor, ...] = field(default=ARTIST_EXTRACTORS)
    title_extractors: tuple[FieldExtractor, ...] = field(default=TITLE_EXTRACTORS)

    def read(self, path: Path) -> LocalTrackMetadata:
        """Read tags from ``path``, falling back to the filename for artist/title.

        Raises:
            MetadataReadError: The file is missing, corrupt or not a recognised
                audio format.
        """
        try:
            audio = mutagen.File(path, easy=True)
        except (mutagen.MutagenError, OSError) as e:
            raise MetadataReadError(f"Failed to read tags from {path}: {e}") from e

        if audio is None:
            raise MetadataReadError(f"Unrecognised audio format: {path}")

        tags: Tags = audio.tags or {}
        artist = extract_first(tags, self.artist_extractors)
        title = extract_first(tags, self.title_extractors)

        if not artist or not title:
            parsed_artist, parsed_title = parse_filename(path.name)
            logger.debug(f"Using filename for missing tags: {path.name}")
            artist = artist or parsed_artist
            title = title or parsed_title

        length = getattr(audio.info, "length", None)

        return LocalTrackMetadata(
            artist=cleanup(artist),
            title=cleanup(title),
            isrc=normalize_isrc(first_value(tags, "isrc")),
            duration_seconds=float(length) if length else None,
            album=cleanup(first_value(tags, "album")) or None,
            year=cleanup(first_value(tags, "date")) or None,
            genre=cleanup(first_value(tags, "genre")) or None,
        )
