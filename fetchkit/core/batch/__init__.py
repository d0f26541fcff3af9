"""Batch execution module for fetchkit.

Components:
- BatchLoader: Main orchestrator
- TaskCoordinator: Exactly-once completion latch
- ConcurrencyLimiter: FIFO bounded admission
- HandlerStrategy: Strategy interface for result storage and failure signals
"""

from fetchkit.core.batch.coordinator import TaskCoordinator
from fetchkit.core.batch.limiter import ConcurrencyLimiter, concurrency_limiter
from fetchkit.core.batch.loader import BatchLoader
from fetchkit.core.batch.models import (
    BatchOutcome,
    CompletionSnapshot,
    CoordinatorState,
    TaskError,
    TaskResult,
    WorkItem,
)
from fetchkit.core.batch.strategies import (
    FactoryStrategy,
    HandlerMode,
    HandlerStrategy,
    StoreAlwaysStrategy,
    StoreNoneStrategy,
    StoreStatusStrategy,
    resolve_strategy,
)

__all__ = [
    "BatchLoader",
    "TaskCoordinator",
    "ConcurrencyLimiter",
    "concurrency_limiter",
    "BatchOutcome",
    "CompletionSnapshot",
    "CoordinatorState",
    "TaskError",
    "TaskResult",
    "WorkItem",
    "HandlerStrategy",
    "FactoryStrategy",
    "HandlerMode",
    "StoreStatusStrategy",
    "StoreAlwaysStrategy",
    "StoreNoneStrategy",
    "resolve_strategy",
]
