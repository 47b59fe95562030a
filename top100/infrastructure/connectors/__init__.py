"""External catalog connectors and request pacing."""

from .rate_limiter import RateLimiter
from .spotify import SpotifyCatalogConnector

__all__ = ["RateLimiter", "SpotifyCatalogConnector"]
