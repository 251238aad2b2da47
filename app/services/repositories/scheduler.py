"""FIFO admission queue that caps concurrently executing detail requests."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from app.config.settings import settings
from app.models.repository import RepositoryDetail, RepositoryRef
from app.utils.log_sanitizer import sanitize_log_extra

logger = logging.getLogger(__name__)

DetailWorker = Callable[[RepositoryRef], Awaitable[RepositoryDetail]]


@dataclass
class PendingTask:
    ref: RepositoryRef
    future: asyncio.Future


class DetailScheduler:
    """Runs at most `capacity` detail requests at once; the rest wait in arrival order.

    There is no priority, no cancellation of admitted work and no
    deduplication: two submissions of the same ref execute twice.
    """

    def __init__(self, worker: DetailWorker, *, capacity: Optional[int] = None) -> None:
        resolved = capacity if capacity is not None else settings.MAX_CONCURRENT_FETCH_DETAILS
        if int(resolved) < 1:
            raise ValueError(f"capacity must be at least 1, got {resolved}")
        self._worker = worker
        self._capacity = int(resolved)
        self._queue: deque[PendingTask] = deque()
        self._running = 0
        self._tasks: set[asyncio.Task] = set()
        self._idle: Optional[asyncio.Event] = None
        self._submitted = 0
        self._completed = 0
        self._failed = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def running(self) -> int:
        return self._running

    @property
    def queued(self) -> int:
        return len(self._queue)

    def stats(self) -> dict[str, int]:
        return {
            "capacity": self._capacity,
            "running": self._running,
            "queued": len(self._queue),
            "submitted": self._submitted,
            "completed": self._completed,
            "failed": self._failed,
        }

    def submit(self, ref: RepositoryRef) -> asyncio.Future:
        """Queue a detail request and return the future its result settles into."""
        loop = asyncio.get_running_loop()
        pending = PendingTask(ref=ref, future=loop.create_future())
        self._queue.append(pending)
        self._submitted += 1
        self._idle_event().clear()
        logger.debug(
            "Detail request queued",
            extra=sanitize_log_extra(repository=ref.full_name, queued=len(self._queue), running=self._running),
        )
        self._admit()
        return pending.future

    async def run(self, ref: RepositoryRef) -> RepositoryDetail:
        return await self.submit(ref)

    async def join(self) -> None:
        """Wait until nothing is queued or running."""
        await self._idle_event().wait()

    def _admit(self) -> None:
        while self._running < self._capacity and self._queue:
            pending = self._queue.popleft()
            self._running += 1
            task = asyncio.ensure_future(self._execute(pending))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _execute(self, pending: PendingTask) -> None:
        try:
            result = await self._worker(pending.ref)
        except asyncio.CancelledError:
            self._failed += 1
            if not pending.future.done():
                pending.future.cancel()
            raise
        except Exception as exc:
            self._failed += 1
            logger.warning(
                "Detail request failed",
                extra=sanitize_log_extra(repository=pending.ref.full_name, error=str(exc)),
            )
            if not pending.future.done():
                pending.future.set_exception(exc)
        else:
            self._completed += 1
            if not pending.future.done():
                pending.future.set_result(result)
        finally:
            # release and admit with no suspension point in between
            self._running -= 1
            self._admit()
            if self._running == 0 and not self._queue:
                self._idle_event().set()

    def _idle_event(self) -> asyncio.Event:
        if self._idle is None:
            self._idle = asyncio.Event()
            if self._running == 0 and not self._queue:
                self._idle.set()
        return self._idle


def build_detail_scheduler(aggregator: Any, *, capacity: Optional[int] = None) -> DetailScheduler:
    return DetailScheduler(aggregator.fetch_details, capacity=capacity)
