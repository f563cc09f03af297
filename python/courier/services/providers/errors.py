"""Provider error classification.

Adapters never raise to the pipeline: every failure is classified here for
logging, and the adapter returns None.

Error classes:
- E_PROVIDER_INVALID_KEY: Authentication failure (401/403)
- E_PROVIDER_RATE_LIMIT: Rate limit exceeded (429)
- E_PROVIDER_TIMEOUT: Request timed out
- E_PROVIDER_DOWN: Provider unavailable (5xx, network error)
- E_PROVIDER_BAD_RESPONSE: Success status but body unusable (not JSON, missing field)
- E_MODEL_NOT_AVAILABLE: Model or endpoint not found (404)
"""

from enum import Enum


class ProviderErrorClass(str, Enum):
    """Normalized provider failure classifications."""

    INVALID_KEY = "E_PROVIDER_INVALID_KEY"
    RATE_LIMIT = "E_PROVIDER_RATE_LIMIT"
    TIMEOUT = "E_PROVIDER_TIMEOUT"
    PROVIDER_DOWN = "E_PROVIDER_DOWN"
    BAD_RESPONSE = "E_PROVIDER_BAD_RESPONSE"
    MODEL_NOT_AVAILABLE = "E_MODEL_NOT_AVAILABLE"


class ProviderError(Exception):
    """Raised inside an adapter when a response cannot be turned into a reply.

    Attributes:
        error_class: The normalized error classification
        message: Human-readable error message
        provider_type: The adapter variant that raised (if known)
    """

    def __init__(
        self,
        error_class: ProviderErrorClass,
        message: str,
        provider_type: str | None = None,
    ):
        self.error_class = error_class
        self.message = message
        self.provider_type = provider_type
        super().__init__(message)


class UnknownProviderTypeError(ValueError):
    """Raised when a provider record names a type no adapter handles."""

    def __init__(self, provider_type: str | None):
        self.provider_type = provider_type
        super().__init__(f"Unknown provider type: {provider_type!r}")


def classify_provider_error(
    status_code: int | None,
    exception: Exception | None = None,
) -> ProviderErrorClass:
    """Classify a failed provider call into a normalized error class.

    Args:
        status_code: HTTP status code (if a response was received)
        exception: The exception that was raised (if any)

    Returns:
        The appropriate ProviderErrorClass for this failure.
    """
    if isinstance(exception, ProviderError):
        return exception.error_class

    # Handle transport exceptions first (no status code)
    if exception is not None and status_code is None:
        exception_type = type(exception).__name__
        if "Timeout" in exception_type:
            return ProviderErrorClass.TIMEOUT
        if isinstance(exception, ValueError):
            # json.JSONDecodeError and friends
            return ProviderErrorClass.BAD_RESPONSE
        return ProviderErrorClass.PROVIDER_DOWN

    if status_code is None:
        return ProviderErrorClass.PROVIDER_DOWN

    if status_code in (401, 403):
        return ProviderErrorClass.INVALID_KEY

    if status_code == 429:
        return ProviderErrorClass.RATE_LIMIT

    if status_code == 404:
        return ProviderErrorClass.MODEL_NOT_AVAILABLE

    if status_code in (408, 504):
        return ProviderErrorClass.TIMEOUT

    return ProviderErrorClass.PROVIDER_DOWN
