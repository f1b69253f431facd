"""Token bucket rate limiter for upstream market-data fetches."""

from __future__ import annotations

import logging
import threading
import time

logger = logging.getLogger(__name__)


class RateLimiter:
    """Thread-safe token bucket.

    Tokens refill continuously at ``calls_per_second`` up to ``burst_size``;
    each call consumes one token.

    :param calls_per_second: Sustained call rate.
    :param burst_size: Maximum number of calls allowed back to back.
    :param name: Identifier used in log messages.
    """

    def __init__(
        self,
        calls_per_second: float,
        burst_size: int = 1,
        name: str = "fetch",
    ) -> None:
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        if burst_size < 1:
            raise ValueError("burst_size must be at least 1")
        self.name = name
        self.calls_per_second = calls_per_second
        self.burst_size = burst_size
        self.tokens = float(burst_size)
        self.last_update = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_update
        self.tokens = min(self.burst_size, self.tokens + elapsed * self.calls_per_second)
        self.last_update = now

    def acquire(
        self,
        timeout: float = 30.0,
        cancel: threading.Event | None = None,
    ) -> bool:
        """Take a token, blocking until one is available.

        :param timeout: Maximum seconds to wait.
        :param cancel: Optional event that aborts the wait when set.
        :returns: True if a token was taken, False on timeout or cancellation.
        """
        start = time.monotonic()
        while True:
            with self._lock:
                self._refill()
                if self.tokens >= 1.0:
                    self.tokens -= 1.0
                    return True
                wait_time = (1.0 - self.tokens) / self.calls_per_second

            if time.monotonic() - start + wait_time > timeout:
                logger.warning("Rate limiter %s timed out after %.1fs", self.name, timeout)
                return False

            # sleep in short chunks so cancellation is noticed promptly
            delay = min(wait_time, 0.5)
            if cancel is not None:
                if cancel.wait(delay):
                    return False
            else:
                time.sleep(delay)
