"""Store-status handler strategy.

Default strategy. Needs the executor to return something with an ``ok``
flag, which ``format="full"`` responses provide.
"""

from collections.abc import Mapping
from typing import Any

import httpx

from fetchkit.core.batch.strategies.base import Handler, HandlerStrategy


def is_ok(result: Any) -> bool:
    """Read the ok flag of a full response, a mapping or a raw httpx response."""
    if isinstance(result, httpx.Response):
        return result.is_success
    if isinstance(result, Mapping):
        return bool(result.get("ok"))
    return bool(getattr(result, "ok", False))


class StoreStatusStrategy(HandlerStrategy):
    """Store every result, fail items whose response is not ok."""

    def apply(self, loader, task_id: str, result: Any, handler: Handler) -> Any:
        loader.context[task_id] = result
        if not is_ok(result):
            return False
        if handler:
            return handler(result)
        return result
