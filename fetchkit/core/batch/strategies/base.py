"""Base handler strategy for fetchkit batch runs.

A handler strategy decides two things for every batch item: whether the raw
result is stored in the loader's shared context, and whether the item counts
as a logical failure. The coordinator only sees the reduced signal.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from fetchkit.core.batch.loader import BatchLoader

Handler = Optional[Callable[[Any], Any]]


class HandlerStrategy(ABC):
    """Abstract base class for result handler strategies.

    Implementations:
    - StoreStatusStrategy: stores the result, fails on a non-ok status (default)
    - StoreAlwaysStrategy: stores the result, fails only via the user handler
    - StoreNoneStrategy: stores nothing, delegates to the user handler

    New strategies can be added by subclassing and implementing :meth:`apply`.
    """

    @abstractmethod
    def apply(self, loader: "BatchLoader", task_id: str, result: Any, handler: Handler) -> Any:
        """Interpret one raw result.

        Args:
            loader: BatchLoader that owns the shared result context
            task_id: Id of the batch item
            result: Raw value returned by the executor
            handler: Optional user handler attached to the item

        Returns:
            ``False`` to signal logical failure, anything else for success
        """

    def bind(self, loader: "BatchLoader", task_id: str, handler: Handler) -> Callable[[Any], Any]:
        """Return the one-argument callable handed to TaskCoordinator.wrap()."""

        def interpret(result: Any) -> Any:
            return self.apply(loader, task_id, result, handler)

        return interpret


class FactoryStrategy(HandlerStrategy):
    """Adapts a plain factory ``(loader, task_id, handler) -> (result) -> signal``."""

    def __init__(self, factory: Callable[..., Callable[[Any], Any]]):
        self.factory = factory

    def bind(self, loader: "BatchLoader", task_id: str, handler: Handler) -> Callable[[Any], Any]:
        return self.factory(loader, task_id, handler)

    def apply(self, loader: "BatchLoader", task_id: str, result: Any, handler: Handler) -> Any:
        return self.bind(loader, task_id, handler)(result)
