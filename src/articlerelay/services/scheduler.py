"""Run the pipeline batch on a fixed interval inside the event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from articlerelay.models import BatchSummary
from articlerelay.notifications import OperatorNotifier

__all__ = ["PipelineScheduler", "DEFAULT_INTERVAL"]

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 10 * 60


class BatchRunner(Protocol):
    async def run_batch(self) -> BatchSummary:
        ...


class PipelineScheduler:
    """Background task that fires ``run_batch`` at startup and every ``interval`` seconds."""

    def __init__(
        self,
        pipeline: BatchRunner,
        *,
        interval: float = DEFAULT_INTERVAL,
        run_on_start: bool = True,
        notifier: OperatorNotifier | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.pipeline = pipeline
        self.interval = interval
        self.run_on_start = run_on_start
        self._notifier = notifier
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> BatchSummary | None:
        """Run a single batch, logging and reporting failures instead of raising."""

        logger.info("Starting scheduled article processing...")
        try:
            summary = await self.pipeline.run_batch()
        except Exception as exc:  # noqa: BLE001 - keep the schedule alive
            logger.exception("Scheduled processing failed")
            if self._notifier is not None:
                await self._notifier.notify(f"Scheduled processing failed: {exc}")
            return None
        logger.info("Scheduled processing completed: %s", summary.message)
        return summary

    async def _loop(self) -> None:
        if self.run_on_start:
            await self.run_once()
        while True:
            await self._sleep(self.interval)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="article-relay-scheduler")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
