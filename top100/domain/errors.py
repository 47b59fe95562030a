"""Domain error taxonomy.

No-match and low-confidence outcomes are not errors; they are ordinary
``MatchStatus.NO_MATCH`` results.
"""

from typing import Any


class Top100Error(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(Top100Error, ValueError):
    """A component was constructed with values outside their valid range."""


class AttemptsExceeded(Top100Error):
    """A retry delay was requested for an attempt beyond the retry budget."""

    def __init__(self, attempt: int, max_retries: int) -> None:
        super().__init__(
            f"Maximum retry attempts exceeded: attempt {attempt} > {max_retries}"
        )
        self.attempt = attempt
        self.max_retries = max_retries


class RequestFailed(Top100Error):
    """A catalog request failed terminally or ran out of retries.

    Attributes:
        operation: Name of the logical request (e.g. "search_by_isrc")
        status: HTTP status of the last failure, None for network or payload errors
        cause: The underlying exception of the last attempt
    """

    def __init__(
        self,
        operation: str,
        cause: BaseException | None = None,
        status: int | None = None,
        message: str | None = None,
    ) -> None:
        detail = message or (str(cause) if cause else "unknown error")
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.cause = cause
        self.status = status

    def as_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "status": self.status,
            "cause": type(self.cause).__name__ if self.cause else None,
        }


class MetadataReadError(Top100Error):
    """An audio file's tags could not be read."""
