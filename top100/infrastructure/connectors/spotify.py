"""Spotify catalog connector with paced, retried search requests.

This module wraps the spotipy library (https://spotipy.readthedocs.io/) for
the client-credentials flow and converts search results into
``CatalogCandidate`` records.

Every logical request runs through :meth:`SpotifyCatalogConnector._request`:
each attempt first waits on the shared RateLimiter, transient failures
(HTTP 429/500/502/503/504 and network errors) are retried with the
limiter's backoff delays, anything else fails immediately. Failures reach
callers as ``RequestFailed``.

spotipy is given a plain requests session, so it performs no retries of
its own and reports the real HTTP status of every failure.
"""

from collections.abc import Callable, Generator
from functools import partial
from typing import Any, TypeVar

from attrs import define, field
import backoff
import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from top100.config import Settings, get_logger, resilient_operation
from top100.domain.entities import CatalogCandidate
from top100.domain.errors import ConfigurationError, RequestFailed
from top100.infrastructure.connectors.rate_limiter import RateLimiter

logger = get_logger(__name__).bind(service="spotify")

T = TypeVar("T")

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

# Failures that reach the retry policy; everything else propagates untouched
_REQUEST_ERRORS = (spotipy.SpotifyException, requests.exceptions.RequestException)


def failure_status(error: BaseException) -> int | None:
    """HTTP status carried by a failed request, if any."""
    if isinstance(error, spotipy.SpotifyException):
        return error.http_status
    if isinstance(error, requests.exceptions.HTTPError) and error.response is not None:
        return error.response.status_code
    return None


def is_retryable(error: BaseException) -> bool:
    """Rate limiting, gateway/server errors and network failures are transient."""
    status = failure_status(error)
    if status is not None:
        return status in RETRYABLE_STATUSES
    return isinstance(
        error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
    )


def retry_delays(rate_limiter: RateLimiter) -> Generator[float | None, Any, None]:
    """Wait generator for ``backoff`` drawing seconds from ``rate_limiter``."""
    yield None  # backoff primes the generator before the first failure
    attempt = 1
    while True:
        yield rate_limiter.retry_delay(attempt) / 1000
        attempt += 1


def convert_spotify_track_to_candidate(spotify_track: dict[str, Any]) -> CatalogCandidate:
    """Convert one Spotify track object into a CatalogCandidate.

    Raises:
        ValueError: If the payload lacks an id, a name or an artist
    """
    try:
        album = spotify_track.get("album") or {}
        return CatalogCandidate(
            catalog_id=spotify_track["id"],
            artist=spotify_track["artists"][0]["name"],
            title=spotify_track["name"],
            duration_ms=spotify_track.get("duration_ms") or 0,
            popularity=spotify_track.get("popularity") or 0,
            album_name=album.get("name"),
            release_date=album.get("release_date"),
            catalog_url=(spotify_track.get("external_urls") or {}).get("spotify"),
            preview_url=spotify_track.get("preview_url"),
        )
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed Spotify track payload: {e!r}") from e


def _search_items(response: Any) -> list[dict[str, Any]]:
    if not isinstance(response, dict):
        raise ValueError(f"Unexpected search response type {type(response).__name__}")
    items = (response.get("tracks") or {}).get("items") or []
    return [item for item in items if item]


@define(slots=True)
class SpotifyCatalogConnector:
    """Catalog search over the Spotify Web API.

    Attributes:
        rate_limiter: Single gate consulted before every attempt
        client_id: Spotify application client id
        client_secret: Spotify application client secret
        isrc_search_limit: Rows requested for an ISRC search
        request_timeout: Per-request timeout in seconds
        market: Optional ISO market code applied to searches
        client: spotipy client; built from the credentials when omitted
    """

    rate_limiter: RateLimiter = field(factory=RateLimiter)
    client_id: str = field(default="", repr=False)
    client_secret: str = field(default="", repr=False)
    isrc_search_limit: int = 1
    request_timeout: int = 30
    market: str | None = None
    client: Any = field(default=None, repr=False)

    def __attrs_post_init__(self) -> None:
        if self.rate_limiter.max_retries < 1:
            raise ConfigurationError("Spotify requests need max_retries >= 1")
        if self.client is None:
            self.client = self._build_client()

    def _build_client(self) -> spotipy.Spotify:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError(
                "Spotify client id and secret are required (SPOTIFY_CLIENT_ID, "
                "SPOTIFY_CLIENT_SECRET)"
            )
        logger.debug("Initializing Spotify connector")
        return spotipy.Spotify(
            auth_manager=SpotifyClientCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
                requests_timeout=self.request_timeout,
            ),
            requests_session=requests.Session(),
            requests_timeout=self.request_timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SpotifyCatalogConnector":
        """Build a connector and its RateLimiter from application settings."""
        return cls(
            rate_limiter=RateLimiter(
                requests_per_second=settings.api.spotify_requests_per_second,
                max_retries=settings.api.spotify_max_retries,
                base_delay_ms=settings.api.spotify_retry_base_delay_ms,
            ),
            client_id=settings.credentials.spotify_client_id,
            client_secret=settings.credentials.spotify_client_secret,
            isrc_search_limit=settings.matching.isrc_search_limit,
            request_timeout=settings.api.spotify_request_timeout,
            market=settings.api.spotify_market,
        )

    # -------------------------------------------------------------------------
    # Retry loop
    # -------------------------------------------------------------------------

    def _on_backoff(self, operation: str, details: dict[str, Any]) -> None:
        exception = details.get("exception")
        logger.warning(
            "Spotify API error (attempt {}), retrying in {:.0f}ms: {}",
            details["tries"],
            details["wait"] * 1000,
            exception,
            operation=operation,
            status=failure_status(exception) if exception else None,
        )

    def _on_giveup(self, operation: str, details: dict[str, Any]) -> None:
        exception = details.get("exception")
        if exception is not None and not is_retryable(exception):
            logger.error(
                "Spotify API error is not retryable: {}",
                exception,
                operation=operation,
                status=failure_status(exception),
            )
            return
        logger.error(
            "Spotify API max retries exceeded after {} attempts: {}",
            details["tries"],
            exception,
            operation=operation,
            elapsed_time=f"{details['elapsed']:.2f}s",
        )

    def _request(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run one logical request with throttling and retries.

        Raises:
            RequestFailed: Terminal failure, or the last transient failure once
                ``max_retries`` attempts have been made
        """

        @backoff.on_exception(
            partial(retry_delays, self.rate_limiter),
            _REQUEST_ERRORS,
            max_tries=self.rate_limiter.max_retries,
            giveup=lambda e: not is_retryable(e),
            jitter=None,
            on_backoff=partial(self._on_backoff, operation),
            on_giveup=partial(self._on_giveup, operation),
            logger=None,
        )
        def attempt() -> T:
            self.rate_limiter.throttle()
            return func(*args, **kwargs)

        try:
            return attempt()
        except _REQUEST_ERRORS as e:
            raise RequestFailed(operation, cause=e, status=failure_status(e)) from e
        except SpotifyOauthError as e:
            raise RequestFailed(
                operation, cause=e, message=f"authentication failed: {e}"
            ) from e

    def _search(self, operation: str, query: str, limit: int) -> list[CatalogCandidate]:
        response = self._request(
            operation,
            self.client.search,
            q=query,
            limit=limit,
            type="track",
            market=self.market,
        )
        try:
            return [
                convert_spotify_track_to_candidate(item) for item in _search_items(response)
            ]
        except ValueError as e:
            raise RequestFailed(operation, cause=e, message=str(e)) from e

    # -------------------------------------------------------------------------
    # Catalog operations
    # -------------------------------------------------------------------------

    @resilient_operation("search_spotify_by_isrc")
    def search_by_isrc(self, isrc: str) -> list[CatalogCandidate]:
        """Search for tracks carrying an ISRC code."""
        query = f"isrc:{isrc}"
        logger.debug(f"Spotify search by ISRC: {query}")
        return self._search("search_by_isrc", query, self.isrc_search_limit)

    @resilient_operation("search_spotify_by_artist_title")
    def search_by_artist_title(
        self, artist: str, title: str, limit: int = 10
    ) -> list[CatalogCandidate]:
        """Free-text search for an artist and title, in Spotify's relevance order."""
        query = f"track:{title} artist:{artist}"
        logger.debug(f"Spotify search by artist/title: {query}")
        return self._search("search_by_artist_title", query, limit)

    @resilient_operation("get_spotify_track")
    def get_track(self, catalog_id: str) -> CatalogCandidate:
        """Fetch one track by its Spotify id."""
        logger.debug(f"Fetching Spotify track: {catalog_id}")
        response = self._request("get_track", self.client.track, catalog_id, market=self.market)
        try:
            return convert_spotify_track_to_candidate(response)
        except ValueError as e:
            raise RequestFailed("get_track", cause=e, message=str(e)) from e
