"""Concurrency-bounded FIFO job queue for browser work.

At most ``concurrency`` jobs run at once; the rest wait in submission order
and start as running slots free up.  Jobs are zero-argument coroutine
functions.  The queue keeps no history: callers await the future returned
by :meth:`ScrapeQueue.submit`.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class QueueFullError(Exception):
    """Raised by :meth:`ScrapeQueue.submit` when ``max_pending`` is reached."""


class ScrapeQueue:
    """FIFO scheduler with a strict concurrency ceiling.

    ``max_pending`` bounds the number of jobs waiting for a slot; ``None``
    (the default) means waiting jobs are never rejected.
    """

    def __init__(self, concurrency: int = 2, max_pending: int | None = None) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.max_pending = max_pending
        self._waiting: deque[tuple[Job, asyncio.Future]] = deque()
        self._running: set[asyncio.Task] = set()

    @property
    def active(self) -> int:
        """Jobs currently holding a slot."""
        return len(self._running)

    @property
    def pending(self) -> int:
        """Jobs waiting for a slot."""
        return len(self._waiting)

    def submit(self, job: Job) -> asyncio.Future:
        """Admit *job* and return a future resolving to its result.

        The job's own exceptions are set on the future; they never affect
        other jobs.
        """
        if (
            self.max_pending is not None
            and self.active >= self.concurrency
            and self.pending >= self.max_pending
        ):
            raise QueueFullError(
                f"Scrape queue is full ({self.pending} jobs waiting)"
            )
        future = asyncio.get_running_loop().create_future()
        self._waiting.append((job, future))
        self._dispatch()
        if not future.done() and self.pending:
            logger.debug("Job queued (%d active, %d waiting)", self.active, self.pending)
        return future

    def _dispatch(self) -> None:
        while self._waiting and len(self._running) < self.concurrency:
            job, future = self._waiting.popleft()
            task = asyncio.ensure_future(self._run(job, future))
            self._running.add(task)
            task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        self._dispatch()

    async def _run(self, job: Job, future: asyncio.Future) -> None:
        try:
            result = await job()
        except Exception as exc:
            logger.exception("Scrape job failed")
            if not future.done():
                future.set_exception(exc)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            # Only reached undone when the task itself was cancelled.
            if not future.done():
                future.cancel()

    async def drain(self) -> None:
        """Wait until every admitted job has settled."""
        while self._running or self._waiting:
            await asyncio.gather(*list(self._running), return_exceptions=True)
