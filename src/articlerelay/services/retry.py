"""Fixed-delay retry combinator for asynchronous operations."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

__all__ = ["RetryPolicy", "invoke", "DEFAULT_ATTEMPTS", "DEFAULT_DELAY"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY = 2.0


def _always(exc: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an operation up to ``max_attempts`` times with a fixed ``delay``.

    ``should_retry`` decides whether a given exception is worth another
    attempt; by default every exception is. The last exception is re-raised
    once attempts run out.
    """

    max_attempts: int = DEFAULT_ATTEMPTS
    delay: float = DEFAULT_DELAY
    should_retry: Callable[[BaseException], bool] = _always
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    async def call(self, operation: Callable[[], Awaitable[T]], *, label: str = "operation") -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as exc:  # noqa: BLE001 - the predicate decides
                if attempt >= self.max_attempts or not self.should_retry(exc):
                    raise
                logger.info(
                    "Retrying %s (%d/%d) after error: %s", label, attempt, self.max_attempts, exc
                )
                await self.sleep(self.delay)

        raise AssertionError("unreachable")  # pragma: no cover


async def invoke(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    *,
    should_retry: Callable[[BaseException], bool] = _always,
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` under a one-off :class:`RetryPolicy`."""

    policy = RetryPolicy(
        max_attempts=max_attempts, delay=delay, should_retry=should_retry, sleep=sleep
    )
    return await policy.call(operation, label=label)
