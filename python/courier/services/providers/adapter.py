"""Abstract base class for provider adapters.

Rules:
- Async adapters sharing one httpx.AsyncClient
- One POST per call, no retries
- Bounded timeout on every request
- No DB access
- No logging of credentials, prompts or replies
- Every failure degrades to None; nothing is raised to the caller

Subclasses implement _send(), which may raise freely (httpx errors,
ProviderError, JSON decode errors). call() owns classification and logging.
"""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from courier.logging import get_logger
from courier.services.providers.errors import (
    ProviderError,
    ProviderErrorClass,
    classify_provider_error,
)
from courier.services.providers.types import ProviderType
from courier.services.redact import safe_kv

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 8.0
CONNECT_TIMEOUT_S = 5.0


class ProviderAdapter(ABC):
    """Translates a canonical prompt -> reply call into one backend's wire format.

    Attributes:
        provider_type: The variant this adapter speaks (set by subclasses)
        default_model: Model used when the provider record has none
    """

    provider_type: ProviderType

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        default_model: str | None = None,
    ):
        """Initialize adapter with shared HTTP client.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            timeout_s: Total timeout for each outbound request.
            default_model: Backend-specific model used when none is configured.
        """
        self._client = client
        self._timeout_s = timeout_s
        self.default_model = default_model

    async def call(
        self,
        endpoint: str,
        credential: str,
        model: str | None,
        prompt: str,
    ) -> str | None:
        """Produce a reply for prompt, or None if the backend did not deliver one.

        Args:
            endpoint: Provider URL (may be a template for some variants).
            credential: Secret used for authentication.
            model: Model override; falls back to default_model.
            prompt: The rendered prompt.

        Returns:
            The reply text, or None on any failure.
        """
        model_name = model or self.default_model
        base = {"provider_type": self.provider_type.value, "model_name": model_name}

        logger.info("provider.call.started", **safe_kv(**base, prompt_chars=len(prompt)))
        start = time.monotonic()

        try:
            reply = await self._send(endpoint, credential, model_name, prompt)
        except httpx.HTTPStatusError as e:
            self._log_failure(base, start, e.response.status_code, e)
            return None
        except Exception as e:
            self._log_failure(base, start, None, e)
            return None

        logger.info(
            "provider.call.finished",
            **safe_kv(
                **base,
                outcome="success",
                latency_ms=int((time.monotonic() - start) * 1000),
                reply_chars=len(reply),
            ),
        )
        return reply

    @abstractmethod
    async def _send(
        self,
        endpoint: str,
        credential: str,
        model: str | None,
        prompt: str,
    ) -> str:
        """Perform the request and extract the reply.

        Raises:
            httpx.HTTPStatusError: On non-2xx HTTP response.
            httpx.TimeoutException: On request timeout.
            httpx.TransportError: On network failure.
            ProviderError: If the body lacks the expected reply field.
            ValueError: If the body is not JSON.
        """

    def _timeout(self) -> httpx.Timeout:
        """Per-request timeout, connect phase capped separately."""
        return httpx.Timeout(self._timeout_s, connect=min(CONNECT_TIMEOUT_S, self._timeout_s))

    async def _post_json(
        self,
        url: str,
        *,
        headers: dict[str, str],
        body: dict,
        params: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body and return the decoded JSON response."""
        response = await self._client.post(
            url,
            headers=headers,
            json=body,
            params=params,
            timeout=self._timeout(),
        )
        response.raise_for_status()
        return response.json()

    def _missing(self, what: str) -> ProviderError:
        """Build the error raised when the expected reply field is absent."""
        return ProviderError(
            ProviderErrorClass.BAD_RESPONSE,
            f"Response missing {what}",
            provider_type=self.provider_type.value,
        )

    def _log_failure(
        self,
        base: dict,
        start: float,
        status_code: int | None,
        exc: Exception,
    ) -> None:
        """Log a failed call with its normalized error class."""
        error_class = classify_provider_error(status_code, exc)
        logger.warning(
            "provider.call.failed",
            **safe_kv(
                **base,
                outcome="error",
                error_class=error_class.value,
                error_type=type(exc).__name__,
                status_code=status_code,
                latency_ms=int((time.monotonic() - start) * 1000),
            ),
        )
