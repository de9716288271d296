"""Retry Executor — bounded exponential backoff for rate-limited data service calls.

Invariants:
    - Only the rate-limit signature is retried: HTTP 429 or service code
      "over_request_rate_limit"; every other error propagates on first occurrence
      with zero delay
    - Delay before retry i (0-based) is base * 2**i + uniform(0, jitter) ms
    - At most policy.max_attempts calls to the operation
    - Exhaustion re-raises the last error object unchanged (no wrapping)
    - No lock held across the backoff sleep

Design Decisions:
    - Free function over a client method: any single-shot coroutine factory can
      be wrapped (data service requests, tests, future collaborators)
    - Jitter avoids synchronized retry storms against a shared rate limit
    - sleep/rand injectable: tests assert the backoff envelope without waiting
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from admin_gateway.core.errors import RATE_LIMIT_SERVICE_CODE, RATE_LIMIT_STATUS

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable per-invocation retry budget."""
    max_attempts: int = 3
    base_delay_ms: float = 100
    jitter_ms: float = 100

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("delays must be non-negative")

    def max_total_delay_ms(self) -> float:
        """Upper bound on time spent sleeping across a whole invocation."""
        return sum(
            self.base_delay_ms * 2 ** i + self.jitter_ms
            for i in range(self.max_attempts - 1)
        )


def is_rate_limited(error: BaseException) -> bool:
    """True iff error carries the transient rate-limit signature."""
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    if status == RATE_LIMIT_STATUS:
        return True
    return getattr(error, "service_code", None) == RATE_LIMIT_SERVICE_CODE


def backoff_delay_ms(
    policy: RetryPolicy,
    attempt: int,
    rand: Callable[[float, float], float] = random.uniform,
) -> float:
    """Exponential backoff with additive jitter in [0, jitter_ms]."""
    return policy.base_delay_ms * 2 ** attempt + rand(0, policy.jitter_ms)  # nosec B311


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    rand: Callable[[float, float], float] = random.uniform,
) -> T:
    """Run operation, retrying rate-limit failures with backoff.

    operation is a zero-argument callable returning a fresh awaitable per
    attempt (a coroutine cannot be awaited twice).
    """
    for attempt in range(policy.max_attempts):
        try:
            return await operation()
        except Exception as e:
            if not is_rate_limited(e) or attempt >= policy.max_attempts - 1:
                raise
            delay = backoff_delay_ms(policy, attempt, rand)
            logger.warning(
                f"Rate limited, retry after {delay:.0f}ms "
                f"(attempt {attempt + 1}/{policy.max_attempts})",
                extra={"attempt": attempt + 1, "delay_ms": round(delay)},
            )
            await sleep(delay / 1000)
    raise AssertionError("unreachable: retry loop exited without result")
