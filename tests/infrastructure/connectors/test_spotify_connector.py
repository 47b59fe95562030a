"""Tests for the Spotify catalog connector's retry policy and conversion."""

from unittest.mock import Mock

import pytest
import requests
from spotipy import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from top100.config import load_settings
from top100.domain.errors import ConfigurationError, RequestFailed
from top100.infrastructure.connectors import RateLimiter, SpotifyCatalogConnector
from top100.infrastructure.connectors.spotify import (
    convert_spotify_track_to_candidate,
    is_retryable,
)


def spotify_track(track_id="4iV5W9uYEdYUVa79Axb7Rh", name="Karma Police", artist="Radiohead"):
    return {
        "id": track_id,
        "name": name,
        "artists": [{"name": artist}, {"name": "Guest"}],
        "album": {"name": "OK Computer", "release_date": "1997-05-21"},
        "duration_ms": 261000,
        "popularity": 72,
        "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
        "preview_url": None,
    }


def search_response(*tracks):
    return {"tracks": {"items": list(tracks)}}


def http_error(status: int) -> SpotifyException:
    return SpotifyException(status, -1, f"HTTP {status}")


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def rate_limiter():
    return RateLimiter(
        requests_per_second=1000, max_retries=3, base_delay_ms=0, sleep=Mock()
    )


@pytest.fixture
def connector(client, rate_limiter):
    return SpotifyCatalogConnector(rate_limiter=rate_limiter, client=client)


class TestConversion:
    def test_first_artist_and_album_fields(self):
        candidate = convert_spotify_track_to_candidate(spotify_track())

        assert candidate.catalog_id == "4iV5W9uYEdYUVa79Axb7Rh"
        assert candidate.artist == "Radiohead"
        assert candidate.album_name == "OK Computer"
        assert candidate.release_date == "1997-05-21"
        assert candidate.popularity == 72
        assert candidate.catalog_url.endswith("4iV5W9uYEdYUVa79Axb7Rh")

    def test_missing_duration_defaults_to_zero(self):
        payload = spotify_track()
        del payload["duration_ms"]

        assert convert_spotify_track_to_candidate(payload).duration_ms == 0

    @pytest.mark.parametrize("missing", ["id", "name", "artists"])
    def test_malformed_payload(self, missing):
        payload = spotify_track()
        del payload[missing]

        with pytest.raises(ValueError):
            convert_spotify_track_to_candidate(payload)

    def test_empty_artist_list_is_malformed(self):
        payload = spotify_track()
        payload["artists"] = []

        with pytest.raises(ValueError):
            convert_spotify_track_to_candidate(payload)


class TestRetryClassification:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient_statuses(self, status):
        assert is_retryable(http_error(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_terminal_statuses(self, status):
        assert not is_retryable(http_error(status))

    def test_network_errors_are_transient(self):
        assert is_retryable(requests.exceptions.ConnectionError("reset"))
        assert is_retryable(requests.exceptions.Timeout("slow"))


class TestSearch:
    def test_search_by_isrc_query(self, connector, client):
        client.search.return_value = search_response(spotify_track())

        results = connector.search_by_isrc("GBAYE9700133")

        assert [c.title for c in results] == ["Karma Police"]
        client.search.assert_called_once_with(
            q="isrc:GBAYE9700133", limit=1, type="track", market=None
        )

    def test_search_by_artist_title_query(self, connector, client):
        client.search.return_value = search_response(
            spotify_track("a"), spotify_track("b")
        )

        results = connector.search_by_artist_title("Radiohead", "Karma Police", 10)

        assert [c.catalog_id for c in results] == ["a", "b"]
        client.search.assert_called_once_with(
            q="track:Karma Police artist:Radiohead", limit=10, type="track", market=None
        )

    def test_empty_result(self, connector, client):
        client.search.return_value = {"tracks": {"items": []}}

        assert connector.search_by_artist_title("Nobody", "Nothing") == []

    def test_get_track(self, connector, client):
        client.track.return_value = spotify_track("xyz")

        assert connector.get_track("xyz").catalog_id == "xyz"

    def test_malformed_row_is_terminal(self, connector, client):
        broken = spotify_track()
        del broken["id"]
        client.search.return_value = search_response(broken)

        with pytest.raises(RequestFailed) as exc_info:
            connector.search_by_isrc("GBAYE9700133")

        assert exc_info.value.status is None
        assert client.search.call_count == 1

    def test_throttles_before_every_attempt(self, client):
        limiter = Mock(spec=RateLimiter)
        limiter.max_retries = 3
        limiter.retry_delay.return_value = 0
        connector = SpotifyCatalogConnector(rate_limiter=limiter, client=client)
        client.search.side_effect = [http_error(503), search_response(spotify_track())]

        connector.search_by_isrc("GBAYE9700133")

        assert limiter.throttle.call_count == 2
        limiter.retry_delay.assert_called_once_with(1)


class TestRetryLoop:
    def test_transient_failure_then_success(self, connector, client):
        client.search.side_effect = [
            http_error(503),
            http_error(429),
            search_response(spotify_track()),
        ]

        results = connector.search_by_artist_title("Radiohead", "Karma Police")

        assert len(results) == 1
        assert client.search.call_count == 3

    def test_terminal_status_not_retried(self, connector, client):
        client.search.side_effect = http_error(404)

        with pytest.raises(RequestFailed) as exc_info:
            connector.search_by_isrc("GBAYE9700133")

        assert client.search.call_count == 1
        assert exc_info.value.status == 404
        assert isinstance(exc_info.value.cause, SpotifyException)

    def test_exhausted_retries_surface_last_error(self, connector, client):
        client.search.side_effect = [http_error(500), http_error(502), http_error(503)]

        with pytest.raises(RequestFailed) as exc_info:
            connector.search_by_isrc("GBAYE9700133")

        assert client.search.call_count == 3
        assert exc_info.value.status == 503
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_network_error_retried(self, connector, client):
        client.search.side_effect = [
            requests.exceptions.ConnectionError("reset"),
            search_response(spotify_track()),
        ]

        assert len(connector.search_by_isrc("GBAYE9700133")) == 1
        assert client.search.call_count == 2

    def test_network_error_exhausted(self, connector, client):
        client.search.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(RequestFailed) as exc_info:
            connector.search_by_isrc("GBAYE9700133")

        assert exc_info.value.status is None
        assert client.search.call_count == 3

    def test_auth_failure_is_terminal(self, connector, client):
        client.search.side_effect = SpotifyOauthError("invalid_client")

        with pytest.raises(RequestFailed, match="authentication failed"):
            connector.search_by_isrc("GBAYE9700133")

        assert client.search.call_count == 1

    def test_unexpected_errors_propagate_unchanged(self, connector, client):
        client.search.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            connector.search_by_isrc("GBAYE9700133")


class TestConstruction:
    def test_requires_credentials_without_client(self, rate_limiter):
        with pytest.raises(ConfigurationError):
            SpotifyCatalogConnector(rate_limiter=rate_limiter)

    def test_requires_at_least_one_attempt(self, client):
        with pytest.raises(ConfigurationError):
            SpotifyCatalogConnector(rate_limiter=RateLimiter(max_retries=0), client=client)

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
        monkeypatch.setenv("SPOTIFY_RETRY_MAX_ATTEMPTS", "2")

        connector = SpotifyCatalogConnector.from_settings(load_settings())

        assert connector.rate_limiter.max_retries == 2
        assert connector.isrc_search_limit == 1
        assert connector.client is not None
