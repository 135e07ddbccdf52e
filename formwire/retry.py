"""Retry policy with exponential backoff."""

from __future__ import annotations

import random

from .errors import ConnectionError, ProtocolError


def default_retryable_status_codes() -> set[int]:
    """HTTP status codes that are considered transient."""
    return {408, 429, 500, 502, 503, 504}


def default_retryable_exceptions() -> tuple[type[BaseException], ...]:
    """Exception types that are considered transient."""
    return (ConnectionError, ProtocolError, TimeoutError)


class RetryPolicy:
    """
    How many times a request is re-sent and how long to wait in between.

    Args:
        max_retries: Retries after the first attempt (0 disables retrying).
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay, in seconds.
        backoff_multiplier: Growth factor applied per retry.
        jitter: Scale each delay by a random factor in [0.5, 1.0).
        retryable_status_codes: Status codes that trigger a retry.
    """

    def __init__(
        self,
        max_retries: int = 1,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        backoff_multiplier: float = 2.0,
        jitter: bool = True,
        retryable_status_codes: set[int] | None = None,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier
        self.jitter = jitter
        if retryable_status_codes is None:
            retryable_status_codes = default_retryable_status_codes()
        self.retryable_status_codes = retryable_status_codes

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based)."""
        delay = min(self.base_delay * (self.backoff_multiplier ** attempt), self.max_delay)
        if self.jitter:
            delay *= (0.5 + random.random() * 0.5)
        return delay

    def should_retry(self, attempt: int, exc: BaseException | None = None, status_code: int | None = None) -> bool:
        """Whether attempt number ``attempt`` (0-based) may be followed by another."""
        if attempt >= self.max_retries:
            return False
        if exc is not None:
            return isinstance(exc, default_retryable_exceptions())
        return status_code in self.retryable_status_codes
