"""Retry policy arithmetic."""

from __future__ import annotations

import pytest

from engine.retry import RetryPolicy


def test_default_policy_allows_two_retries_with_capped_exponential_backoff() -> None:
    policy = RetryPolicy()
    assert policy.max_attempts == 3
    assert policy.max_retries == 2
    assert [policy.backoff(attempt) for attempt in (1, 2, 3, 4, 5)] == [1.0, 2.0, 4.0, 8.0, 8.0]
    assert policy.should_retry(1)
    assert policy.should_retry(2)
    assert not policy.should_retry(3)


def test_fixed_and_immediate_policies() -> None:
    fixed = RetryPolicy.fixed(1.0, max_attempts=3)
    assert [fixed.backoff(attempt) for attempt in (1, 2, 3)] == [1.0, 1.0, 1.0]
    assert RetryPolicy.immediate(max_attempts=1).backoff(1) == 0.0
    assert not RetryPolicy.immediate(max_attempts=1).should_retry(1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"base_delay_sec": -1.0},
        {"multiplier": 0.5},
    ],
)
def test_invalid_policies_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_backoff_attempts_are_one_based() -> None:
    with pytest.raises(ValueError):
        RetryPolicy().backoff(0)
