"""Serial job queue.

One worker task takes jobs off an asyncio queue strictly in submission
order; the next job does not start until the previous one has finished.
Blocking browser work is pushed onto a single-thread executor through
`run_blocking`, so at most one driver is ever active.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeVar

from statusbot.models.domain import AutomationJob

logger = logging.getLogger(__name__)

T = TypeVar("T")

JobRunner = Callable[[AutomationJob], Awaitable[Any]]


@dataclass
class QueueTicket:
    """Returned by `JobQueue.submit`.

    `position` is the number of jobs ahead of and including this one at
    submission time; it is informational only and is never updated.
    """

    position: int
    future: asyncio.Future


class JobQueue:
    """FIFO queue with a single worker."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[tuple[AutomationJob, JobRunner, asyncio.Future]] = (
            asyncio.Queue()
        )
        self._worker: asyncio.Task | None = None
        self._executor: ThreadPoolExecutor | None = None
        self.enqueued_count = 0
        self.completed_count = 0
        self.in_flight = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        """Start the worker task. Must be called from a running loop."""
        if self.is_running:
            return
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="statusbot-job")
        self._worker = asyncio.create_task(self._work(), name="statusbot-job-worker")
        logger.info("Job queue started")

    async def stop(self) -> None:
        """Cancel the worker and shut down the executor.

        Jobs still waiting in the queue are cancelled.
        """
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        while not self._queue.empty():
            job, _, future = self._queue.get_nowait()
            if not future.done():
                future.cancel()
            logger.info("Dropped queued job %s on shutdown", job.request_id)

        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        logger.info("Job queue stopped")

    def submit(self, job: AutomationJob, runner: JobRunner) -> QueueTicket:
        """Enqueue `job`; `runner(job)` is awaited when it reaches the front.

        Returns:
            QueueTicket whose future resolves with the runner's result or
            its exception.
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.enqueued_count += 1
        position = self.enqueued_count - self.completed_count
        self._queue.put_nowait((job, runner, future))
        logger.info(
            "Queued request %s for %s at position %d", job.request_id, job.requester, position
        )
        return QueueTicket(position=position, future=future)

    async def run_blocking(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking callable on the queue's single worker thread."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def _work(self) -> None:
        while True:
            job, runner, future = await self._queue.get()
            self.in_flight += 1
            try:
                logger.info("Processing request %s", job.request_id)
                result = await runner(job)
                if not future.done():
                    future.set_result(result)
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                logger.error("Job %s failed: %s", job.request_id, e, exc_info=True)
                if not future.done():
                    future.set_exception(e)
            finally:
                self.in_flight -= 1
                self.completed_count += 1
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted job has finished."""
        await self._queue.join()
