"""Error classifier for fetchkit.

Classifies exceptions raised while executing batch items so failures can be
reported with a category. Classification is informational only; nothing here
retries.
"""

import asyncio

import httpx

from fetchkit.core.errors import ErrorCategory


class ErrorClassifier:
    """Classifies errors into categories.

    Static methods for stateless classification.
    """

    @staticmethod
    def categorize(error: Exception) -> ErrorCategory:
        """Categorize an error into TRANSIENT, RATE_LIMIT, PERMANENT, or UNKNOWN.

        Args:
            error: Exception to categorize

        Returns:
            ErrorCategory enum value
        """
        if isinstance(
            error,
            (
                asyncio.TimeoutError,
                httpx.TimeoutException,
                httpx.NetworkError,
                httpx.RemoteProtocolError,
            ),
        ):
            return ErrorCategory.TRANSIENT

        if isinstance(error, httpx.HTTPStatusError):
            return ErrorClassifier.categorize_status(error.response.status_code)

        # Malformed URLs, validation problems
        if isinstance(error, (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError)):
            return ErrorCategory.PERMANENT

        error_str = str(error).lower()
        if "timeout" in error_str or "timed out" in error_str:
            return ErrorCategory.TRANSIENT

        return ErrorCategory.UNKNOWN

    @staticmethod
    def categorize_status(status_code: int) -> ErrorCategory:
        """Categorize an HTTP status code.

        Args:
            status_code: HTTP response status

        Returns:
            ErrorCategory enum value
        """
        if status_code == 429:
            return ErrorCategory.RATE_LIMIT

        if status_code in (502, 503, 504):
            return ErrorCategory.TRANSIENT

        if status_code in (400, 401, 403, 404, 405):
            return ErrorCategory.PERMANENT

        return ErrorCategory.UNKNOWN
