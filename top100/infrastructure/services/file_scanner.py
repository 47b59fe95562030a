"""Uploads directory scanner.

Walks the uploads tree and describes every eligible audio file as a
``SourceFile``: public URL, size, modification time and a fast content
checksum.
"""

from datetime import datetime
import hashlib
import os
from pathlib import Path

from attrs import define, field

from top100.config import Settings, get_logger
from top100.domain.entities import SourceFile
from top100.domain.errors import ConfigurationError

logger = get_logger(__name__).bind(service="scanner")

CHECKSUM_CHUNK_SIZE = 64 * 1024
MTIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def calculate_checksum(path: Path, chunk_size: int = CHECKSUM_CHUNK_SIZE) -> str:
    """SHA-256 of the file, or of its first and last chunk for large files."""
    size = path.stat().st_size
    if size <= chunk_size * 2:
        return hashlib.sha256(path.read_bytes()).hexdigest()

    with path.open("rb") as handle:
        head = handle.read(chunk_size)
        handle.seek(-chunk_size, os.SEEK_END)
        tail = handle.read(chunk_size)

    return hashlib.sha256(head + tail).hexdigest()


def format_mtime(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime(MTIME_FORMAT)


@define(frozen=True, slots=True)
class FileScanner:
    """Recursive scanner for audio uploads.

    Attributes:
        uploads_path: Root of the uploads tree
        source_url_prefix: Public URL prefix the tree is served under
        extensions: Accepted file extensions, compared case-insensitively
        exclude_dirs: Directory names whose contents are skipped
    """

    uploads_path: Path = field(converter=Path)
    source_url_prefix: str = "/wp-content/uploads/"
    extensions: tuple[str, ...] = field(
        default=(".mp3",),
        converter=lambda exts: tuple(ext.lower() for ext in exts),
    )
    exclude_dirs: frozenset[str] = field(
        default=frozenset({"backup", "cache", "tmp"}), converter=frozenset
    )

    def __attrs_post_init__(self) -> None:
        if not self.uploads_path.is_dir():
            raise ConfigurationError(
                f"Uploads directory does not exist: {self.uploads_path}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileScanner":
        scan = settings.scan
        return cls(
            uploads_path=scan.uploads_path,
            source_url_prefix=scan.source_url_prefix,
            extensions=scan.extensions,
            exclude_dirs=scan.exclude_dirs,
        )

    def scan(self) -> list[SourceFile]:
        """Find every eligible file under the uploads directory, sorted by path."""
        logger.info(f"Scanning uploads directory: {self.uploads_path}")

        files = [
            source
            for path in sorted(self.uploads_path.rglob("*"))
            if (source := self._describe(path)) is not None
        ]

        logger.info(f"Found {len(files)} audio files")
        return files

    def is_excluded(self, path: Path) -> bool:
        relative = path.relative_to(self.uploads_path)
        return any(part in self.exclude_dirs for part in relative.parts[:-1])

    def source_url(self, path: Path) -> str:
        relative = path.relative_to(self.uploads_path).as_posix()
        return self.source_url_prefix.rstrip("/") + "/" + relative

    def _describe(self, path: Path) -> SourceFile | None:
        if not path.is_file() or path.suffix.lower() not in self.extensions:
            return None

        if self.is_excluded(path):
            logger.debug(f"Skipping excluded file: {path}")
            return None

        stat = path.stat()
        if stat.st_size == 0:
            logger.warning(f"Skipping zero-byte file: {path}")
            return None

        if not os.access(path, os.R_OK):
            logger.warning(f"Skipping unreadable file: {path}")
            return None

        try:
            checksum = calculate_checksum(path)
        except OSError as e:
            logger.warning(f"Skipping unreadable file: {path} ({e})")
            return None

        return SourceFile(
            file_path=path,
            source_url=self.source_url(path),
            filename=path.name,
            file_size=stat.st_size,
            file_mtime=format_mtime(stat.st_mtime),
            checksum=checksum,
        )
