"""
Error taxonomy and failure categorization for provider calls.

Categories are carried on failed ``TaskResult`` objects so callers can decide
whether to retry, surface an error, or substitute cached content.  The
orchestrator itself only ever retries once, via the fallback provider.
"""

from __future__ import annotations

import httpx


class ErrorCategory:
    """
    Error category constants for failed requests.

    Transport categories are all eligible for the one-shot fallback;
    ``NO_PROVIDERS`` and ``UNEXPECTED`` are terminal.
    """

    NO_PROVIDERS = "no_providers"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    NETWORK_ERROR = "network_error"
    UNEXPECTED = "unexpected"

    TRANSPORT: frozenset[str] = frozenset({
        TIMEOUT,
        RATE_LIMIT,
        SERVICE_UNAVAILABLE,
        INVALID_RESPONSE,
        API_ERROR,
        NETWORK_ERROR,
    })


class OrchestratorError(Exception):
    """Base class for orchestrator errors."""

    category: str = ErrorCategory.UNEXPECTED


class NoProvidersAvailable(OrchestratorError):
    """No configured provider passes the availability filter."""

    category = ErrorCategory.NO_PROVIDERS

    def __init__(self, message: str = "No AI models available") -> None:
        super().__init__(message)


class ProviderTransportError(OrchestratorError):
    """
    A provider call failed: bad HTTP status, network failure, timeout, or an
    unparseable response body.

    Attributes:
        provider: Provider identifier value (e.g. ``'openai'``).
        status_code: HTTP status for bad-status failures, else ``None``.
        category: One of the :class:`ErrorCategory` transport categories.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        category: str = ErrorCategory.NETWORK_ERROR,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.category = category


class UnexpectedExecutionError(OrchestratorError):
    """Wraps an error outside the taxonomy, caught at the batch boundary."""

    category = ErrorCategory.UNEXPECTED

    def __init__(self, original: BaseException) -> None:
        message = str(original) or type(original).__name__
        super().__init__(message)
        self.original = original


# ---------------------------------------------------------------------------
# Categorization
# ---------------------------------------------------------------------------

def categorize_status(status_code: int) -> str:
    """
    Map a non-success HTTP status to an error category.

    Args:
        status_code: HTTP status returned by the provider.

    Returns:
        Category string from :class:`ErrorCategory`.
    """
    if status_code == 429:
        return ErrorCategory.RATE_LIMIT
    if status_code in (408, 504):
        return ErrorCategory.TIMEOUT
    if status_code >= 500:
        return ErrorCategory.SERVICE_UNAVAILABLE
    return ErrorCategory.API_ERROR


def categorize_transport_failure(error: Exception) -> str:
    """
    Classify an exception raised while talking to a provider.

    Checks httpx's exception types first, then decode/shape failures from
    response parsing; anything else is treated as a network failure.

    Args:
        error: Exception raised during the HTTP call or response parsing.

    Returns:
        Category string from :class:`ErrorCategory`.
    """
    if isinstance(error, ProviderTransportError):
        return error.category

    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(error, httpx.HTTPStatusError):
        return categorize_status(error.response.status_code)

    # json.JSONDecodeError is a ValueError
    if isinstance(error, (ValueError, KeyError, IndexError, TypeError)):
        return ErrorCategory.INVALID_RESPONSE

    return ErrorCategory.NETWORK_ERROR


def as_transport_error(provider: str, error: Exception) -> ProviderTransportError:
    """
    Wrap any exception from a provider call as a ``ProviderTransportError``.

    Errors that are already transport errors are returned unchanged.  Others
    keep their message, or their class name when the message is empty.
    """
    if isinstance(error, ProviderTransportError):
        return error
    wrapped = ProviderTransportError(
        provider,
        str(error) or type(error).__name__,
        category=categorize_transport_failure(error),
    )
    wrapped.__cause__ = error
    return wrapped
