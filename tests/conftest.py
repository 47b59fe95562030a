"""Shared fixtures and record builders for the test suite."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from top100.domain.entities import (
    CatalogCandidate,
    LocalTrackMetadata,
    MatchMethod,
    MatchResult,
    MatchStatus,
    SourceFile,
    TrackObservation,
)
from top100.domain.matching import CatalogSearchProtocol


def make_candidate(
    catalog_id: str = "sp1",
    artist: str = "Radiohead",
    title: str = "Karma Police",
    duration_ms: int = 261000,
    popularity: int = 70,
    release_date: str | None = "1997-05-21",
) -> CatalogCandidate:
    return CatalogCandidate(
        catalog_id=catalog_id,
        artist=artist,
        title=title,
        duration_ms=duration_ms,
        popularity=popularity,
        album_name="OK Computer",
        release_date=release_date,
        catalog_url=f"https://open.spotify.com/track/{catalog_id}",
    )


def make_observation(
    artist: str = "Radiohead",
    title: str = "Karma Police",
    popularity: int = 70,
    release_date: str | None = "1997-05-21",
    file_mtime: str | None = "2025-10-15 12:00:00",
    catalog_id: str | None = None,
) -> TrackObservation:
    """A matched observation whose catalog values equal its tags."""
    candidate = make_candidate(
        catalog_id=catalog_id or f"{artist}-{title}".lower().replace(" ", "-"),
        artist=artist,
        title=title,
        popularity=popularity,
        release_date=release_date,
    )
    match = MatchResult.accepted(
        candidate,
        status=MatchStatus.AUTO_PICKED,
        matched_via=MatchMethod.ARTIST_TITLE,
        confidence=0.95,
        candidates_found=1,
    )
    source = None
    if file_mtime is not None:
        source = SourceFile(
            file_path=Path(f"/uploads/{artist} - {title}.mp3"),
            source_url=f"/wp-content/uploads/{artist} - {title}.mp3",
            filename=f"{artist} - {title}.mp3",
            file_size=1024,
            file_mtime=file_mtime,
            checksum="0" * 64,
        )
    return TrackObservation(
        metadata=LocalTrackMetadata(artist=artist, title=title),
        match=match,
        source=source,
    )


def make_unmatched_observation(
    artist: str = "Nobody", title: str = "Nothing"
) -> TrackObservation:
    return TrackObservation(
        metadata=LocalTrackMetadata(artist=artist, title=title),
        match=MatchResult.no_match(),
    )


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def observation_factory():
    return make_observation


@pytest.fixture
def unmatched_factory():
    return make_unmatched_observation


@pytest.fixture
def mock_catalog():
    """Catalog stub returning no results unless a test configures it."""
    catalog = Mock(spec=CatalogSearchProtocol)
    catalog.search_by_isrc.return_value = []
    catalog.search_by_artist_title.return_value = []
    return catalog


@pytest.fixture
def karma_police():
    return LocalTrackMetadata(
        artist="Radiohead", title="Karma Police", duration_seconds=261.0
    )
