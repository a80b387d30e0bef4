"""Rate-limited task queue with exponential backoff.

A single worker serves submitted coroutine functions in FIFO order. A task
that fails is moved to the back of the queue with a longer backoff so other
pending work gets a turn before it is retried. Every attempt, successful or
not, is followed by a base interval plus random jitter, which caps total
throughput towards the chat transport.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from ..config.settings import RateLimitConfig
from ..util.async_helpers import SleepFn, sleep_with_jitter

logger = logging.getLogger(__name__)

TaskFn = Callable[[], Awaitable[Any]]


@dataclass
class QueuedTask:
    """One pending unit of work and the future its submitter awaits."""

    task: TaskFn
    future: asyncio.Future
    backoff: float
    enqueued_at: float
    retries: int = 0
    backoff_history: list[float] = field(default_factory=list)


class RateLimiter:
    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._sleep = sleep
        self._clock = clock
        self._rand = rand
        self._queue: deque[QueuedTask] = deque()
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, task: TaskFn) -> asyncio.Future:
        """Queue *task* and return a future settled with its result or final error."""
        loop = asyncio.get_running_loop()
        item = QueuedTask(
            task=task,
            future=loop.create_future(),
            backoff=self.config.interval,
            enqueued_at=self._clock(),
        )
        self._queue.append(item)
        if not self.is_processing:
            self._worker = loop.create_task(self._process())
        return item.future

    async def join(self) -> None:
        """Wait until the worker has drained the queue."""
        while self.is_processing:
            await asyncio.wait({self._worker})

    async def stop(self) -> None:
        """Cancel the worker and every pending submission."""
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        while self._queue:
            item = self._queue.popleft()
            if not item.future.done():
                item.future.cancel()

    async def _process(self) -> None:
        while self._queue:
            item = self._queue[0]
            try:
                result = await item.task()
            except Exception as exc:
                await self._on_failure(item, exc)
            else:
                self._queue.popleft()
                if not item.future.done():
                    item.future.set_result(result)
                if self._queue:
                    self._queue[0].backoff = self.config.interval

            await sleep_with_jitter(
                self.config.interval,
                self.config.max_jitter,
                sleep=self._sleep,
                rand=self._rand,
            )

    async def _on_failure(self, item: QueuedTask, exc: Exception) -> None:
        item.retries += 1
        elapsed = self._clock() - item.enqueued_at
        logger.warning(
            "[rate-limit] task failed (attempt %d/%d, %.1fs since enqueue): %s",
            item.retries, self.config.max_retries, elapsed, exc,
        )

        if item.retries >= self.config.max_retries or elapsed > self.config.timeout:
            self._queue.popleft()
            logger.error("[rate-limit] giving up after %d attempt(s): %s", item.retries, exc)
            if not item.future.done():
                item.future.set_exception(exc)
            return

        item.backoff *= self.config.backoff_multiplier
        item.backoff_history.append(item.backoff)
        self._queue.append(self._queue.popleft())
        await self._sleep(item.backoff)
