"""Task coordinator for fetchkit batch runs.

Tracks completion of a set of named tasks and fires exactly one terminal
callback once every required id has completed, successfully or not.

Usage:
    >>> coordinator = TaskCoordinator(
    ...     require=["config", "lang", "dom"],
    ...     on_load=lambda snapshot, *args: print("ready", snapshot.trigger),
    ...     on_fail=lambda snapshot, *args: print("failed", snapshot.state.failed),
    ... )
    >>> adapter = coordinator.wrap("config", lambda res: res if res.ok else False)
    >>> adapter(response)

Callback signature:
    callback(snapshot: CompletionSnapshot, *args)

    ``snapshot.context`` is the shared context given at construction,
    ``snapshot.state`` a copy of the coordinator state when the batch
    resolved and ``snapshot.trigger`` the id whose completion resolved it.
    ``args`` are whatever the triggering mark_success()/mark_failure() call
    forwarded.
"""

import asyncio
import threading
from typing import Any, Callable, Iterable, List, Optional, Union

from fetchkit.core.batch.models import CompletionSnapshot, CoordinatorState
from fetchkit.core.logging import logger

Callback = Callable[..., Any]


class TaskCoordinator:
    """Completion latch over a set of required task ids.

    If ``on_fail`` is omitted, ``on_load`` is called for both outcomes;
    callers that need finer detail can branch on :meth:`has_failed`.
    """

    def __init__(
        self,
        require: Union[str, Iterable[str]] = (),
        on_load: Optional[Callback] = None,
        on_fail: Optional[Callback] = None,
        context: Any = None,
    ):
        self._state = CoordinatorState()
        self._lock = threading.Lock()
        self._snapshot: Optional[CompletionSnapshot] = None
        self._waiters: List[asyncio.Future] = []

        self.on_load = on_load if callable(on_load) else None
        self.on_fail = on_fail if callable(on_fail) else self.on_load
        self.context = context

        self.require(require)

    @property
    def state(self) -> CoordinatorState:
        """Copy of the current state."""
        with self._lock:
            return self._state.copy()

    @property
    def winner(self) -> Optional[str]:
        return self._state.winner

    def require(self, ids: Union[str, Iterable[str]]) -> bool:
        """Declare one or more ids that must complete.

        Accepts a single id, a whitespace separated string ("config lang")
        or an iterable of ids. Ids already present are left untouched.
        """
        if isinstance(ids, str):
            ids = ids.split()
        with self._lock:
            for task_id in ids:
                if task_id:
                    self._state.required.add(task_id)
        return True

    def mark_success(self, task_id: str, *args: Any) -> bool:
        """Mark ``task_id`` completed.

        Returns False (and does nothing) for ids that are not required.
        """
        return self._complete(task_id, False, args)

    def mark_failure(self, task_id: str, *args: Any) -> bool:
        """Mark ``task_id`` failed. A failure still counts toward completion."""
        return self._complete(task_id, True, args)

    def is_complete(self, task_id: Optional[str] = None) -> bool:
        """Whether ``task_id`` (or, without an id, the whole set) has completed."""
        if task_id is not None:
            return task_id in self._state.required and task_id in self._state.completed
        return self._resolved()

    def has_failed(self, task_id: Optional[str] = None) -> bool:
        """Whether ``task_id`` (or, without an id, any task) has failed."""
        if task_id is not None:
            return task_id in self._state.failed
        return bool(self._state.failed)

    def succeeded(self) -> bool:
        """Resolved with no failures."""
        return self._resolved() and not self._state.failed

    def wrap(self, task_id: str, handler: Optional[Callable[..., Any]] = None) -> Callable[..., Any]:
        """Return an adapter that records completion of ``task_id``.

        The adapter calls ``handler`` with the task outcome. A return value of
        exactly ``False`` marks the id failed; the id is then marked complete
        either way, and the adapter hands the original outcome back.
        """
        self.require(task_id)

        def adapter(*args: Any) -> Any:
            result = handler(*args) if callable(handler) else True
            if result is False:
                self.mark_failure(task_id, *args)
            self.mark_success(task_id, *args)
            return args[0] if args else None

        return adapter

    async def wait(self) -> CompletionSnapshot:
        """Wait until the terminal callback has fired and return its snapshot."""
        with self._lock:
            if self._snapshot is not None:
                return self._snapshot
            future = asyncio.get_running_loop().create_future()
            self._waiters.append(future)
        return await future

    def _resolved(self) -> bool:
        return self._state.required <= self._state.completed

    def _complete(self, task_id: str, failed: bool, args: tuple) -> bool:
        with self._lock:
            if task_id not in self._state.required:
                return False

            if failed:
                self._state.failed.add(task_id)
            self._state.completed.add(task_id)

            if self._state.winner is not None or not self._resolved():
                return True

            self._state.winner = task_id
            snapshot = CompletionSnapshot(
                context=self.context,
                state=self._state.copy(),
                trigger=task_id,
            )
            self._snapshot = snapshot
            waiters, self._waiters = self._waiters, []

        any_failed = bool(snapshot.state.failed)
        logger.debug(
            "coordinator_resolved",
            trigger=task_id,
            required=len(snapshot.state.required),
            failed=sorted(snapshot.state.failed),
        )

        for future in waiters:
            future.get_loop().call_soon_threadsafe(_resolve_waiter, future, snapshot)

        callback = self.on_fail if any_failed else self.on_load
        if callback is not None:
            callback(snapshot, *args)

        return True


def _resolve_waiter(future: asyncio.Future, snapshot: CompletionSnapshot) -> None:
    if not future.done():
        future.set_result(snapshot)
