"""Handler strategy lookup.

Maps strategy names and shorthand values to strategy instances.
"""

from enum import Enum
from typing import Any, Dict

from fetchkit.core.batch.strategies.base import FactoryStrategy, HandlerStrategy
from fetchkit.core.batch.strategies.none_strategy import StoreNoneStrategy
from fetchkit.core.batch.strategies.status_strategy import StoreStatusStrategy
from fetchkit.core.batch.strategies.store_strategy import StoreAlwaysStrategy
from fetchkit.core.errors import ConfigurationError


class HandlerMode(str, Enum):
    """Built-in handler strategies."""

    STATUS = "status"
    STORE = "store"
    NONE = "none"


STRATEGIES: Dict[HandlerMode, HandlerStrategy] = {
    HandlerMode.STATUS: StoreStatusStrategy(),
    HandlerMode.STORE: StoreAlwaysStrategy(),
    HandlerMode.NONE: StoreNoneStrategy(),
}


def resolve_strategy(value: Any = None) -> HandlerStrategy:
    """Resolve a strategy setting to a HandlerStrategy instance.

    Args:
        value: ``None`` (default store-status), ``False`` (store-none), a
            HandlerMode or its string value, a HandlerStrategy instance, or a
            factory ``(loader, task_id, handler) -> (result) -> signal``

    Returns:
        HandlerStrategy instance

    Raises:
        ConfigurationError: If the value names no known strategy
    """
    if value is None:
        return STRATEGIES[HandlerMode.STATUS]

    if value is False:
        return STRATEGIES[HandlerMode.NONE]

    if isinstance(value, HandlerStrategy):
        return value

    if isinstance(value, str):
        try:
            return STRATEGIES[HandlerMode(value.lower())]
        except ValueError:
            valid = ", ".join(mode.value for mode in HandlerMode)
            raise ConfigurationError(
                f"Unknown handler strategy {value!r} (expected one of: {valid})"
            ) from None

    if isinstance(value, type) and issubclass(value, HandlerStrategy):
        return value()

    if callable(value):
        return FactoryStrategy(value)

    raise ConfigurationError(f"Invalid handler strategy: {value!r}")
