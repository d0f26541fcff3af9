"""Store-always handler strategy."""

from typing import Any

from fetchkit.core.batch.strategies.base import Handler, HandlerStrategy


class StoreAlwaysStrategy(HandlerStrategy):
    """Store every result regardless of status.

    Items fail only when the user handler returns ``False``.
    """

    def apply(self, loader, task_id: str, result: Any, handler: Handler) -> Any:
        loader.context[task_id] = result
        return handler(result) if handler else result
