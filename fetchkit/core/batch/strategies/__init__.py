"""Handler strategies for fetchkit batch runs.

Strategy pattern implementation for result storage and failure interpretation.
"""

from fetchkit.core.batch.strategies.base import FactoryStrategy, HandlerStrategy
from fetchkit.core.batch.strategies.none_strategy import StoreNoneStrategy
from fetchkit.core.batch.strategies.registry import HandlerMode, resolve_strategy
from fetchkit.core.batch.strategies.status_strategy import StoreStatusStrategy, is_ok
from fetchkit.core.batch.strategies.store_strategy import StoreAlwaysStrategy

__all__ = [
    "HandlerStrategy",
    "FactoryStrategy",
    "StoreStatusStrategy",
    "StoreAlwaysStrategy",
    "StoreNoneStrategy",
    "HandlerMode",
    "resolve_strategy",
    "is_ok",
]
