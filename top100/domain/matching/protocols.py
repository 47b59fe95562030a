"""Protocol definitions for the catalog search boundary."""

from typing import Protocol, runtime_checkable

from top100.domain.entities import CatalogCandidate


@runtime_checkable
class CatalogSearchProtocol(Protocol):
    """Search operations the matcher needs from a music catalog.

    Both methods may raise ``RequestFailed`` once the implementation's own
    retry policy is exhausted or the failure is terminal.
    """

    def search_by_isrc(self, isrc: str) -> list[CatalogCandidate]:
        """Return catalog rows carrying exactly this ISRC, best first."""
        ...

    def search_by_artist_title(
        self, artist: str, title: str, limit: int = 10
    ) -> list[CatalogCandidate]:
        """Return up to ``limit`` rows for a free-text artist/title query."""
        ...
