"""Bounded pool of asyncio tasks.

Caps how many coroutines run at once with an asyncio.Semaphore: a slot is
acquired before a task starts and released when the task is done. The
pool also keeps the set of tasks that have not been reaped yet, so that
callers can wait for the first (or every) task to finish and get its
failure re-raised.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class BoundedTaskPool:
    """Runs awaitables as tasks with at most `max_concurrent` in flight."""

    def __init__(self, max_concurrent: int):
        """Initializes the pool.

        Args:
            max_concurrent: Maximum number of tasks allowed to run at once.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be positive, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._slots = asyncio.Semaphore(max_concurrent)
        # Task -> start sequence number; dict keeps start order.
        self._in_flight: Dict[asyncio.Task, int] = {}
        self._started = 0
        # Tasks holding a slot; finished-but-unreaped tasks are not counted.
        self._running = 0
        self.peak_in_flight = 0

    def __len__(self) -> int:
        return self._running

    @property
    def is_full(self) -> bool:
        return len(self._in_flight) >= self.max_concurrent

    async def submit(self, awaitable: Awaitable[Any]) -> asyncio.Task:
        """Starts `awaitable` as a task once a slot is free.

        Blocks while the pool is full. Failures of the started task are not
        raised here; they surface from wait_for_any() / wait_all().
        """
        await self._slots.acquire()
        try:
            task = asyncio.ensure_future(awaitable)
        except BaseException:
            self._slots.release()
            raise
        self._running += 1
        task.add_done_callback(self._release)
        self._in_flight[task] = self._started
        self._started += 1
        self.peak_in_flight = max(self.peak_in_flight, self._running)
        logger.debug(f"Task started ({self._running}/{self.max_concurrent} in flight)")
        return task

    def _release(self, task: asyncio.Task) -> None:
        self._running -= 1
        self._slots.release()

    async def wait_for_any(self) -> None:
        """Waits until at least one in-flight task finishes.

        Only the tasks that actually finished are removed, whichever they
        are. If any of them failed, the failure of the earliest started one
        is re-raised.
        """
        if not self._in_flight:
            return
        done, _ = await asyncio.wait(list(self._in_flight), return_when=asyncio.FIRST_COMPLETED)
        self._reap(done)

    async def wait_all(self) -> None:
        """Waits for every in-flight task, then re-raises the earliest failure."""
        if not self._in_flight:
            return
        done, _ = await asyncio.wait(list(self._in_flight))
        self._reap(done)

    def abandon(self) -> None:
        """Stops tracking the remaining tasks without awaiting or cancelling them.

        Each task keeps running; whatever it ends up raising is retrieved
        and logged at DEBUG once it finishes.
        """
        for task in self._in_flight:
            task.add_done_callback(_log_abandoned_result)
        if self._in_flight:
            logger.debug(f"Abandoned {len(self._in_flight)} in-flight tasks")
        self._in_flight.clear()

    def _reap(self, done: Iterable[asyncio.Task]) -> None:
        """Removes finished tasks and re-raises the first failure by start order."""
        first_error: Optional[BaseException] = None
        for task in sorted(done, key=self._in_flight.__getitem__):
            del self._in_flight[task]
            if task.cancelled():
                error: Optional[BaseException] = asyncio.CancelledError()
            else:
                # Retrieving the exception also silences asyncio's
                # "exception was never retrieved" warning.
                error = task.exception()
            if error is not None and first_error is None:
                first_error = error
        logger.debug(f"Reaped finished tasks, {self._running} still in flight")
        if first_error is not None:
            raise first_error


def _log_abandoned_result(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Abandoned task failed after the drain stopped: {type(error).__name__}: {error}")
