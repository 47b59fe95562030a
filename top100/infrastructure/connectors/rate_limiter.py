"""Request pacing and retry backoff for catalog API calls.

One RateLimiter instance is the single gate on call timing for a connector.
It is not thread-safe: callers resolve tracks one at a time, and the
last-call timestamp would need a lock before lookups ran in parallel.
"""

from collections.abc import Callable
import random
import time

from attrs import define, field, validators

from top100.config import get_logger
from top100.domain.errors import AttemptsExceeded

logger = get_logger(__name__).bind(service="rate_limiter")

JITTER_FRACTION = 0.25


@define(slots=True)
class RateLimiter:
    """Caps outbound calls at ``requests_per_second`` and computes backoff delays.

    Attributes:
        requests_per_second: Maximum sustained call rate
        max_retries: Highest attempt number ``retry_delay`` accepts
        base_delay_ms: Delay before the first retry, doubled per attempt
        clock: Monotonic time source in seconds
        sleep: Blocking sleep in seconds
        rng: Random source for jitter
    """

    requests_per_second: int = field(default=10, validator=validators.gt(0))
    max_retries: int = field(default=5, validator=validators.ge(0))
    base_delay_ms: int = field(default=500, validator=validators.ge(0))
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    rng: random.Random = field(factory=random.Random, repr=False)
    last_request_time: float | None = field(default=None, init=False)

    @property
    def min_interval(self) -> float:
        return 1.0 / self.requests_per_second

    def throttle(self) -> None:
        """Block until one interval has passed since the previous throttle().

        The first call never blocks.
        """
        if self.last_request_time is not None:
            elapsed = self.clock() - self.last_request_time
            if elapsed < self.min_interval:
                wait = self.min_interval - elapsed
                logger.trace(f"Throttling for {wait:.3f}s")
                self.sleep(wait)

        self.last_request_time = self.clock()

    def retry_delay(self, attempt: int) -> int:
        """Backoff delay in milliseconds before retrying after ``attempt`` failures.

        ``base_delay_ms * 2**(attempt - 1)`` with uniform jitter of +/-25%,
        truncated to an integer and clamped at zero.

        Raises:
            AttemptsExceeded: If ``attempt`` is greater than ``max_retries``
            ValueError: If ``attempt`` is less than 1
        """
        if attempt > self.max_retries:
            raise AttemptsExceeded(attempt, self.max_retries)
        if attempt < 1:
            raise ValueError(f"Attempts are numbered from 1, got {attempt}")

        delay = self.base_delay_ms * 2 ** (attempt - 1)
        jitter = delay * JITTER_FRACTION
        return max(0, int(delay + self.rng.uniform(-jitter, jitter)))
