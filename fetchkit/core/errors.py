"""Exceptions and error categories for fetchkit."""

from enum import Enum


class ErrorCategory(str, Enum):
    """Error categories used when reporting failed batch items.

    - TRANSIENT: Temporary errors (network timeouts, service unavailable)
    - RATE_LIMIT: Rate limiting errors (429)
    - PERMANENT: Permanent errors (400, 401, 404, invalid params)
    - UNKNOWN: Anything else
    """

    TRANSIENT = "transient"
    RATE_LIMIT = "rate_limit"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class FetchKitError(Exception):
    """Base class for all fetchkit errors."""


class ConfigurationError(FetchKitError, ValueError):
    """Invalid construction argument (bad limit, unknown strategy, ...)."""


class BatchValidationError(FetchKitError, ValueError):
    """A batch item list failed preflight validation."""


class SpecError(FetchKitError, LookupError):
    """A spec could not be loaded, or an operation could not be resolved."""


class ModuleLoadError(FetchKitError, ImportError):
    """A dynamic module could not be imported."""
