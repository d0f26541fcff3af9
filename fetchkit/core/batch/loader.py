"""Batch loader for fetchkit.

Coordinates a list of HTTP requests tracked by unique ids. Each item runs
through a ConcurrencyLimiter, its result is interpreted by a HandlerStrategy
and completion is recorded in a TaskCoordinator, which fires one terminal
callback when the whole set has settled.

Each item follows this structure::

    {
        "id": "config",            # Required: unique identifier
        "method": "get",           # Optional: "get" (default) or "post"
        "url": "/config.json",     # Required: resource URL
        "handler": fn,             # Optional: transform/validate; return False to fail
        "opts": {...},             # Optional: per-item options over batch defaults
        "data": {...},             # Optional: body for post items
    }

Stored results are available afterwards through ``loader.get(id)``.
"""

import asyncio
import secrets
import time
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from fetchkit.config import Config
from fetchkit.core.batch.coordinator import Callback, TaskCoordinator
from fetchkit.core.batch.limiter import ConcurrencyLimiter
from fetchkit.core.batch.models import BatchOutcome, TaskError, TaskResult, WorkItem
from fetchkit.core.batch.strategies import HandlerStrategy, resolve_strategy
from fetchkit.core.error_classifier import ErrorClassifier
from fetchkit.core.errors import BatchValidationError
from fetchkit.core.logging import logger

ItemInput = Union[WorkItem, Dict[str, Any]]


class BatchLoader:
    """Runs batches of requests against an HTTP executor.

    The executor is any object with ``async get(url, opts)`` and
    ``async post(url, data, opts)``; :class:`fetchkit.core.http.HTTP` is the
    one Net wires in.
    """

    def __init__(
        self,
        http: Any,
        fetch_opts: Optional[Dict[str, Any]] = None,
        strategy: Any = None,
    ):
        """Initialize batch loader.

        Args:
            http: Executor used for every request
            fetch_opts: Default options applied to all requests
            strategy: Handler strategy setting (see ``resolve_strategy``)
        """
        self.http = http
        self.context: Dict[str, Any] = {}
        self.fetch_opts: Dict[str, Any] = dict(fetch_opts or {})
        self.strategy: HandlerStrategy = resolve_strategy(strategy)

    def set_fetch_opts(self, opts: Optional[Dict[str, Any]] = None) -> None:
        self.fetch_opts = dict(opts or {})

    def set_strategy(self, strategy: Any) -> None:
        self.strategy = resolve_strategy(strategy)

    def get(self, task_id: str) -> Any:
        """Retrieve the stored result for ``task_id``, or None.

        Only values written by the handler strategy (or by a handler writing
        into ``context`` itself) are available here.
        """
        return self.context.get(task_id)

    async def run(
        self,
        items: Iterable[ItemInput] = (),
        on_load: Optional[Callback] = None,
        on_fail: Optional[Callback] = None,
        *,
        await_all: bool = True,
        limit: Optional[int] = None,
    ) -> BatchOutcome:
        """Run a list of requests and coordinate their completion.

        Args:
            items: Request definitions (dicts or WorkItem)
            on_load: Called once when every item completed without failure
            on_fail: Called once instead of on_load if any item failed
                (on_load is used when omitted)
            await_all: Wait for every item before returning
            limit: Maximum concurrent requests (default from Config)

        Returns:
            BatchOutcome whose ``results`` is ``{id: result}`` when awaiting,
            otherwise the list of per-item futures in submission order

        Raises:
            BatchValidationError: If any item is invalid or ids repeat.
                Raised before any request starts.
            ConfigurationError: If ``limit`` is not a positive int
        """
        validated = self._preflight_check(items)
        limit = Config.batch_limit() if limit is None else limit

        coordinator = TaskCoordinator(
            require=[item.id for item in validated],
            on_load=on_load,
            on_fail=on_fail,
            context=self.context,
        )
        limiter = ConcurrencyLimiter(limit)

        batch_id = f"batch_{int(time.time() * 1000)}_{secrets.token_urlsafe(8)}"
        start_time = time.time()

        logger.info(
            "batch_run_started",
            batch_id=batch_id,
            total_items=len(validated),
            limit=limit,
            strategy=type(self.strategy).__name__,
            await_all=await_all,
        )

        futures: List[asyncio.Future] = [
            limiter.submit(self._build_job(batch_id, item, coordinator))
            for item in validated
        ]

        if not await_all:
            return BatchOutcome(coordinator=coordinator, results=futures)

        completed = await asyncio.gather(*futures)
        results = {task.id: task.result for task in completed}

        logger.info(
            "batch_run_completed",
            batch_id=batch_id,
            total_items=len(validated),
            failed=len(coordinator.state.failed),
            processing_time=round(time.time() - start_time, 2),
        )

        return BatchOutcome(coordinator=coordinator, results=results)

    def _build_job(self, batch_id: str, item: WorkItem, coordinator: TaskCoordinator):
        opts = {"format": "full", **self.fetch_opts, **item.opts}
        adapter = coordinator.wrap(item.id, self.strategy.bind(self, item.id, item.handler))

        async def job() -> TaskResult:
            try:
                if item.method == "post":
                    result = await self.http.post(item.url, item.data, opts)
                else:
                    result = await self.http.get(item.url, opts)
            except Exception as e:
                return self._record_error(batch_id, item, coordinator, e)

            try:
                adapter(result)
            except Exception as e:
                return self._record_error(batch_id, item, coordinator, e)

            logger.debug(
                "batch_item_completed",
                batch_id=batch_id,
                item_id=item.id,
                failed=coordinator.has_failed(item.id),
            )
            return TaskResult(id=item.id, result=result)

        return job

    def _record_error(
        self,
        batch_id: str,
        item: WorkItem,
        coordinator: TaskCoordinator,
        error: Exception,
    ) -> TaskResult:
        # Already complete means the error came from a terminal callback
        if coordinator.is_complete(item.id):
            raise error

        task_error = TaskError.from_exception(item.id, error, ErrorClassifier.categorize(error))
        logger.warning(
            "batch_item_failed",
            batch_id=batch_id,
            item_id=item.id,
            url=item.url,
            error=task_error.error,
            error_type=task_error.error_type,
            category=task_error.category.value,
        )
        coordinator.mark_failure(item.id, task_error)
        return TaskResult(id=item.id, result=task_error)

    def _preflight_check(self, items: Iterable[ItemInput]) -> List[WorkItem]:
        """Validate every item before anything runs.

        Raises:
            BatchValidationError: On a missing id/url, unsupported method or
                duplicate id
        """
        seen = set()
        validated = []

        for index, item in enumerate(items):
            work_item = self._to_work_item(index, item)

            if work_item.id in seen:
                raise BatchValidationError(f"Duplicate batch ID detected: {work_item.id!r}")
            seen.add(work_item.id)

            validated.append(work_item)

        return validated

    @staticmethod
    def _to_work_item(index: int, item: ItemInput) -> WorkItem:
        if isinstance(item, WorkItem):
            return item

        if not isinstance(item, dict):
            raise BatchValidationError(
                f"Batch item {index} must be a dict or WorkItem, got {type(item).__name__}"
            )

        try:
            return WorkItem.model_validate(item)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'item'}: {err['msg']}"
                for err in e.errors()
            )
            raise BatchValidationError(
                f"Invalid batch item {index} (id={item.get('id')!r}): {problems}"
            ) from e
