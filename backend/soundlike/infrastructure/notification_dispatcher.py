"""Notification Dispatcher — bounded worker pool for fire-and-forget jobs.

Invariants:
    - submit() never blocks and never raises: a full queue or stopped dispatcher drops
      the job with a warning
    - A failing job is logged and isolated; it never affects other jobs or the request
      that submitted it
    - No retries, no cancellation of queued jobs, no ordering guarantee between jobs
      once more than one worker is running

Design Decisions:
    - asyncio.Queue + N worker tasks over BackgroundTasks/create_task-per-job: bounded
      memory under bursts, and drain() gives shutdown and tests a deterministic barrier
    - Jobs are zero-arg coroutine factories: the coroutine is only created when a worker
      picks it up, so dropped jobs leave no "never awaited" coroutines behind
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]


class NotificationDispatcher:
    """Runs submitted jobs on a fixed number of background worker tasks."""

    def __init__(self, workers: int = 4, queue_size: int = 1000):
        self.worker_count = max(1, workers)
        self.queue: asyncio.Queue[tuple[str, Job]] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i)) for i in range(self.worker_count)
        ]
        logger.info(f"Notification dispatcher started with {self.worker_count} workers")

    def submit(self, name: str, job: Job) -> bool:
        """Enqueue a job without waiting. Returns False when the job was dropped."""
        if not self._workers:
            logger.warning(
                f"Dispatcher not running, dropping job {name}",
                extra={"notification": name},
            )
            return False
        try:
            self.queue.put_nowait((name, job))
        except asyncio.QueueFull:
            logger.warning(
                f"Notification queue full, dropping job {name}",
                extra={"notification": name},
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued job has been processed."""
        await self.queue.join()

    async def stop(self, drain: bool = True) -> None:
        if drain and self._workers:
            await self.drain()
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Notification dispatcher stopped")

    async def _worker(self, worker_id: int) -> None:
        while True:
            name, job = await self.queue.get()
            try:
                await job()
            except Exception:
                logger.exception(
                    f"Worker {worker_id} failed job {name}",
                    extra={"notification": name, "event": "cleanup_warning"},
                )
            finally:
                self.queue.task_done()
