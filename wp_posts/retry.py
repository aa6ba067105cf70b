from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    Exponential backoff for remote calls.

    - max_attempts includes the first call (1 disables retries).
    - the n-th retry waits base_delay_seconds * 2**(n-1), capped at max_delay_seconds.
    - jitter_ratio scales each delay by a random factor in [1-jitter, 1+jitter].
    - a server Retry-After hint raises the delay, capped by retry_after_cap_seconds
      (0 means uncapped).
    """

    max_attempts: int = 5
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 20.0
    jitter_ratio: float = 0.25
    retry_after_cap_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must be >= 0")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        if not (0.0 <= self.jitter_ratio <= 1.0):
            raise ValueError("jitter_ratio must be between 0 and 1")
        if self.retry_after_cap_seconds < 0:
            raise ValueError("retry_after_cap_seconds must be >= 0")

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryConfig":
        return cls(
            max_attempts=int(settings.max_attempts),
            base_delay_seconds=float(settings.base_delay_seconds),
            max_delay_seconds=float(settings.max_delay_seconds),
            jitter_ratio=float(settings.jitter_ratio),
            retry_after_cap_seconds=float(settings.retry_after_cap_seconds),
        )

    def backoff_seconds(self, failure_attempt: int) -> float:
        delay = self.base_delay_seconds * (2 ** max(0, int(failure_attempt) - 1))
        return min(self.max_delay_seconds, max(0.0, float(delay)))

    def jittered(self, delay: float) -> float:
        if delay <= 0 or self.jitter_ratio <= 0:
            return max(0.0, delay)
        return max(0.0, delay * random.uniform(1.0 - self.jitter_ratio, 1.0 + self.jitter_ratio))

    def capped_retry_after(self, value: float | None) -> float | None:
        if value is None:
            return None
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return None
        if seconds < 0:
            return None
        if self.retry_after_cap_seconds > 0:
            seconds = min(seconds, self.retry_after_cap_seconds)
        return seconds


@dataclass(frozen=True)
class RetryEvent:
    operation: str
    failure_attempt: int
    next_attempt: int
    max_attempts: int

    delay_seconds: float
    retry_after_seconds: float | None
    reason: str | None

    error_type: str
    error_message: str

    post_id: str | None


IsRetryableFn = Callable[[BaseException], tuple[bool, float | None, str | None]]
OnRetryFn = Callable[[RetryEvent], None]
SleepFn = Callable[[float], None]


def call_with_retries(
    fn: Callable[[], T],
    *,
    cfg: RetryConfig,
    is_retryable: IsRetryableFn,
    operation: str,
    on_retry: OnRetryFn | None = None,
    sleep_fn: SleepFn | None = None,
    post_id: Any = None,
) -> T:
    """
    Call fn() until it succeeds, fails with a non-retryable error, or runs out
    of attempts. The last error is re-raised unchanged.
    """
    op = (operation or "").strip() or "operation"
    sleeper = sleep_fn or time.sleep
    attempt = 0

    while True:
        attempt += 1
        try:
            return fn()
        except Exception as exc:
            retryable, retry_after, reason = is_retryable(exc)
            if not retryable or attempt >= cfg.max_attempts:
                raise

            hint = cfg.capped_retry_after(retry_after)
            delay = cfg.backoff_seconds(attempt)
            if hint is not None:
                delay = max(delay, hint)
            delay = cfg.jittered(delay)

            if on_retry is not None:
                on_retry(
                    RetryEvent(
                        operation=op,
                        failure_attempt=attempt,
                        next_attempt=attempt + 1,
                        max_attempts=cfg.max_attempts,
                        delay_seconds=float(delay),
                        retry_after_seconds=hint,
                        reason=reason,
                        error_type=type(exc).__name__,
                        error_message=(str(exc) or "").strip(),
                        post_id=None if post_id is None else str(post_id),
                    )
                )

            if delay > 0:
                sleeper(float(delay))
