#!/usr/bin/env python3
"""
Token Bucket - client-side pacing for embedding API calls.

The bucket is owned by the provider adapter that uses it. Clock and sleep are
injected so the pacing can be tested without waiting.
"""
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TokenBucket:
    """Classic token bucket: ``capacity`` tokens, refilled at ``refill_rate`` tokens/second."""

    def __init__(
        self,
        capacity: float,
        refill_rate: float,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        if refill_rate <= 0:
            raise ValueError(f"refill_rate must be > 0, got {refill_rate}")

        self.capacity = float(capacity)
        self.refill_rate = float(refill_rate)
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._tokens = float(capacity)
        self._last_refill = self._clock()
        self._lock = threading.Lock()

    @classmethod
    def per_minute(cls, requests_per_minute: int, **kwargs) -> "TokenBucket":
        """Bucket allowing ``requests_per_minute`` calls, with bursts up to the same amount."""
        return cls(
            capacity=requests_per_minute,
            refill_rate=requests_per_minute / 60.0,
            **kwargs
        )

    @property
    def available(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    def try_acquire(self, tokens: float = 1.0) -> bool:
        """Take tokens if available right now; never blocks."""
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def acquire(self, tokens: float = 1.0) -> float:
        """
        Block until ``tokens`` are available, then take them.

        Returns:
            Total seconds spent waiting
        """
        if tokens > self.capacity:
            raise ValueError(f"Cannot acquire {tokens} tokens from a bucket of {self.capacity}")

        waited = 0.0
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return waited
                wait = (tokens - self._tokens) / self.refill_rate

            logger.debug(f"Rate limit pacing: waiting {wait:.3f}s")
            self._sleep(wait)
            waited += wait
