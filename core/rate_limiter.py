"""
Contact Relay Rate Limiter - Fixed Window Admission Control

Counts requests per client key inside a fixed time window and rejects the
ones beyond the limit before any email work happens. State lives in process
memory in an OrderedDict kept in least-recently-used order, so stale windows
are dropped lazily and the number of tracked keys stays bounded.
"""

import math
import threading
import time
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Any

from core.error_handling import RateLimitExceeded
from core.metrics import (
    RATE_LIMIT_ADMITTED_TOTAL,
    RATE_LIMIT_REJECTED_TOTAL,
    RATE_LIMIT_EVICTIONS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class RateWindow:
    """Per-key counter for the current window."""
    count: int
    window_start: float

    def is_expired(self, now: float, window_seconds: float) -> bool:
        return now - self.window_start >= window_seconds


@dataclass
class RateLimiterStats:
    """Snapshot of limiter activity."""
    tracked_keys: int
    admitted: int
    rejected: int
    evictions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracked_keys": self.tracked_keys,
            "admitted": self.admitted,
            "rejected": self.rejected,
            "evictions": self.evictions,
        }


class FixedWindowRateLimiter:
    """Thread-safe in-memory fixed window rate limiter.

    Features:
    - One window per client key, started lazily on the first request
    - Count is capped at limit + 1, so rejected calls stop incrementing
    - Expired windows are purged on access
    - LRU eviction once max_keys distinct keys are tracked

    Example:
        limiter = FixedWindowRateLimiter(window_seconds=60)
        limiter.admit("203.0.113.7", limit=5)  # raises RateLimitExceeded on the 6th call
    """

    def __init__(
        self,
        window_seconds: float = 60,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize limiter.

        Args:
            window_seconds: Length of each fixed window
            max_keys: Maximum number of tracked client keys
            clock: Monotonic time source (injectable for tests)
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")

        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock

        self._windows: "OrderedDict[str, RateWindow]" = OrderedDict()
        self._lock = threading.Lock()

        self._admitted = 0
        self._rejected = 0
        self._evictions = 0

        logger.debug(
            f"FixedWindowRateLimiter initialized: window={window_seconds}s, "
            f"max_keys={max_keys}"
        )

    def admit(self, client_key: str, limit: int) -> None:
        """
        Count one request for client_key and decide admission.

        Args:
            client_key: Identifier of the caller (usually its IP address)
            limit: Maximum requests allowed in one window

        Raises:
            RateLimitExceeded: If this request is beyond the limit
        """
        now = self._clock()

        with self._lock:
            self._purge_stale_head(now)

            window = self._windows.get(client_key)
            if window is None or window.is_expired(now, self.window_seconds):
                self._windows[client_key] = RateWindow(count=1, window_start=now)
                self._windows.move_to_end(client_key)
                self._evict_overflow()
                self._admitted += 1
                RATE_LIMIT_ADMITTED_TOTAL.inc()
                return

            self._windows.move_to_end(client_key)
            if window.count <= limit:
                window.count += 1

            if window.count > limit:
                self._rejected += 1
                RATE_LIMIT_REJECTED_TOTAL.inc()
                retry_after = max(
                    1, math.ceil(window.window_start + self.window_seconds - now)
                )
                raise RateLimitExceeded(client_key, limit, retry_after)

            self._admitted += 1
            RATE_LIMIT_ADMITTED_TOTAL.inc()

    def purge_expired(self) -> int:
        """Drop every expired window.

        Returns:
            Number of windows removed
        """
        now = self._clock()
        with self._lock:
            expired = [
                key for key, window in self._windows.items()
                if window.is_expired(now, self.window_seconds)
            ]
            for key in expired:
                del self._windows[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired rate windows")
        return len(expired)

    def reset(self) -> None:
        """Forget all windows and counters."""
        with self._lock:
            self._windows.clear()
            self._admitted = 0
            self._rejected = 0
            self._evictions = 0

    def stats(self) -> RateLimiterStats:
        with self._lock:
            return RateLimiterStats(
                tracked_keys=len(self._windows),
                admitted=self._admitted,
                rejected=self._rejected,
                evictions=self._evictions,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    # Callers must hold self._lock

    def _purge_stale_head(self, now: float) -> None:
        # Least recently used entries sit at the head; stop at the first live one.
        while self._windows:
            key, window = next(iter(self._windows.items()))
            if not window.is_expired(now, self.window_seconds):
                break
            del self._windows[key]

    def _evict_overflow(self) -> None:
        while len(self._windows) > self.max_keys:
            evicted_key, _ = self._windows.popitem(last=False)
            self._evictions += 1
            RATE_LIMIT_EVICTIONS_TOTAL.inc()
            logger.debug(f"Rate limiter evicted LRU key: {evicted_key}")
