"""Concurrency limiter for fetchkit batch runs.

Admits at most ``max_concurrent`` jobs at a time from a FIFO queue. The
limiter knows nothing about task identity or success; a job's exception is
delivered to that job's future only.
"""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Set, Tuple

from fetchkit.core.errors import ConfigurationError

Job = Callable[[], Awaitable[Any]]


class ConcurrencyLimiter:
    """FIFO admission queue bounded by ``max_concurrent`` running jobs.

    Example:
        >>> limiter = ConcurrencyLimiter(2)
        >>> futures = [limiter.submit(lambda: fetch(url)) for url in urls]
        >>> results = await asyncio.gather(*futures)
    """

    def __init__(self, max_concurrent: int = 8):
        if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int):
            raise ConfigurationError(
                f"max_concurrent must be an int, got {type(max_concurrent).__name__}"
            )
        if max_concurrent <= 0:
            raise ConfigurationError(f"max_concurrent must be positive, got {max_concurrent}")

        self._max_concurrent = max_concurrent
        self._active = 0
        self._queue: Deque[Tuple[Job, asyncio.Future]] = deque()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def active(self) -> int:
        """Number of jobs currently running."""
        return self._active

    @property
    def pending(self) -> int:
        """Number of jobs queued but not yet started."""
        return len(self._queue)

    def submit(self, job: Job) -> asyncio.Future:
        """Queue a zero-argument job and return a future for its result.

        Must be called from a running event loop.
        """
        future = asyncio.get_running_loop().create_future()
        self._queue.append((job, future))
        self._next()
        return future

    __call__ = submit

    def _next(self) -> None:
        while self._queue and self._active < self._max_concurrent:
            job, future = self._queue.popleft()
            if future.cancelled():
                continue
            self._active += 1
            task = asyncio.ensure_future(self._run(job, future))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, job: Job, future: asyncio.Future) -> None:
        try:
            result = await job()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            self._active -= 1
            self._next()


def concurrency_limiter(max_concurrent: int = 8) -> Callable[[Job], asyncio.Future]:
    """Return the bound ``submit`` function of a new ConcurrencyLimiter."""
    return ConcurrencyLimiter(max_concurrent).submit
