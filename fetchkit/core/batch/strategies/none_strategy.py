"""Store-none handler strategy."""

from typing import Any

from fetchkit.core.batch.strategies.base import Handler, HandlerStrategy


class StoreNoneStrategy(HandlerStrategy):
    """Skip automatic storage; the user handler decides everything.

    Return ``False`` from the handler to fail the item. Write into
    ``loader.context`` from the handler if the result should be retrievable
    through ``BatchLoader.get()``.
    """

    def apply(self, loader, task_id: str, result: Any, handler: Handler) -> Any:
        return handler(result) if handler else result
