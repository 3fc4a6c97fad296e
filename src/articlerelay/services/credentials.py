"""Rotate through interchangeable API credentials until one succeeds."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Sequence, Tuple, TypeVar

from articlerelay.errors import CredentialExhaustedError

__all__ = ["CredentialPool", "sequential"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

FailureHook = Callable[[int, BaseException], Awaitable[None]]


def sequential(credentials: Sequence[str]) -> Iterable[Tuple[int, str]]:
    """Yield ``(position, credential)`` pairs in configured order, 1-based."""

    return enumerate(credentials, start=1)


@dataclass(frozen=True)
class CredentialPool:
    """Ordered list of credentials tried one after another.

    Unlike :class:`~articlerelay.services.retry.RetryPolicy`, which repeats the
    same call, the pool repeats the same logical operation under a different
    identity. This works around per-key rate limits and quotas.
    """

    credentials: Tuple[str, ...]
    delay: float = 1.0
    strategy: Callable[[Sequence[str]], Iterable[Tuple[int, str]]] = sequential
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "credentials", tuple(self.credentials))

    def __len__(self) -> int:
        return len(self.credentials)

    async def run(
        self,
        operation: Callable[[str], Awaitable[T]],
        *,
        on_failure: FailureHook | None = None,
    ) -> T:
        """Return the first successful ``operation(credential)`` result.

        Raises :class:`CredentialExhaustedError` with every individual failure
        once all credentials have been tried.
        """

        failures: list[Tuple[int, BaseException]] = []
        attempts = list(self.strategy(self.credentials))

        for index, (position, credential) in enumerate(attempts):
            logger.info("Attempting request with API key %d...", position)
            try:
                return await operation(credential)
            except Exception as exc:  # noqa: BLE001 - any failure rotates to the next key
                failures.append((position, exc))
                logger.error("Error with API key %d: %s", position, exc)
                if on_failure is not None:
                    await on_failure(position, exc)
                if index < len(attempts) - 1:
                    await self.sleep(self.delay)

        raise CredentialExhaustedError(failures)
