"""fetchkit: async HTTP, spec dispatch, dynamic modules and coordinated batches."""

from fetchkit.core.batch import (
    BatchLoader,
    BatchOutcome,
    ConcurrencyLimiter,
    HandlerMode,
    HandlerStrategy,
    TaskCoordinator,
    WorkItem,
)
from fetchkit.core.errors import (
    BatchValidationError,
    ConfigurationError,
    FetchKitError,
    ModuleLoadError,
    SpecError,
)
from fetchkit.core.http import HTTP, FullResponse
from fetchkit.net import Net

__version__ = "0.1.0"

__all__ = [
    "Net",
    "HTTP",
    "FullResponse",
    "BatchLoader",
    "BatchOutcome",
    "ConcurrencyLimiter",
    "TaskCoordinator",
    "HandlerMode",
    "HandlerStrategy",
    "WorkItem",
    "FetchKitError",
    "ConfigurationError",
    "BatchValidationError",
    "SpecError",
    "ModuleLoadError",
]
