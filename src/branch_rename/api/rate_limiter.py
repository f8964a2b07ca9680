"""Client-side pacing of GitHub API calls."""

import time


class RateLimiter:
    """Token bucket rate limiter for API requests."""

    def __init__(self, requests_per_second: float = 10.0):
        """Initialize rate limiter.

        Args:
            requests_per_second: Maximum requests per second allowed
        """
        self.requests_per_second = requests_per_second
        self.tokens = requests_per_second
        self.last_update = time.monotonic()

    def _refill(self) -> float:
        now = time.monotonic()
        elapsed = now - self.last_update
        self.last_update = now
        self.tokens = min(
            self.requests_per_second, self.tokens + elapsed * self.requests_per_second
        )
        return self.tokens

    def acquire(self) -> None:
        """Acquire a token for making a request.

        Blocks until a token is available.
        """
        if self._refill() >= 1:
            self.tokens -= 1
            return

        time.sleep(self.time_until_next_request())
        self.last_update = time.monotonic()
        self.tokens = 0

    def can_proceed(self) -> bool:
        """Check if a request can proceed without blocking."""
        elapsed = time.monotonic() - self.last_update
        tokens = min(
            self.requests_per_second, self.tokens + elapsed * self.requests_per_second
        )
        return tokens >= 1

    def time_until_next_request(self) -> float:
        """Get seconds until the next request is allowed."""
        if self.can_proceed():
            return 0.0

        return (1 - self.tokens) / self.requests_per_second
