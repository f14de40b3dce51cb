"""Retry/backoff policy for model-provider calls."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts a provider call gets and how long to wait between them.

    `max_attempts` counts the first call, so the default allows two retries.
    `backoff(attempt)` is the delay after the 1-based `attempt` failed:
    `base_delay_sec * multiplier ** (attempt - 1)`, capped at `max_delay_sec`.
    A multiplier of 1 gives a fixed delay.
    """

    max_attempts: int = 3
    base_delay_sec: float = 1.0
    multiplier: float = 2.0
    max_delay_sec: float = 8.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.base_delay_sec < 0 or self.max_delay_sec < 0:
            raise ValueError("Retry delays must be >= 0.")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1.")

    @classmethod
    def fixed(cls, delay_sec: float, *, max_attempts: int = 3) -> "RetryPolicy":
        """Constant delay between attempts."""
        return cls(max_attempts=max_attempts, base_delay_sec=delay_sec, multiplier=1.0, max_delay_sec=delay_sec)

    @classmethod
    def immediate(cls, *, max_attempts: int = 3) -> "RetryPolicy":
        """No delay between attempts (tests, scripted providers)."""
        return cls.fixed(0.0, max_attempts=max_attempts)

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    def backoff(self, attempt: int) -> float:
        """Return seconds to wait after failed attempt number `attempt` (1-based)."""
        if attempt < 1:
            raise ValueError("attempt is 1-based.")
        delay = self.base_delay_sec * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay_sec)

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts
