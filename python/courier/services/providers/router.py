"""Provider router: adapter selection by provider type.

- Every accepted type name (variant or vendor alias) is bound to one adapter
  instance at construction time
- Unknown type names raise UnknownProviderTypeError from resolve_adapter()
- generate_reply() is the single entry point the pipeline uses; like the
  adapters themselves it returns None instead of raising
"""

import httpx

from courier.logging import get_logger
from courier.services.providers.adapter import DEFAULT_TIMEOUT_S, ProviderAdapter
from courier.services.providers.chat_completion_adapter import ChatCompletionAdapter
from courier.services.providers.errors import UnknownProviderTypeError
from courier.services.providers.generative_content_adapter import GenerativeContentAdapter
from courier.services.providers.generic_json_adapter import GenericJsonAdapter
from courier.services.providers.message_api_adapter import MessageApiAdapter
from courier.services.providers.types import (
    PROVIDER_TYPES,
    ProviderConfig,
    ProviderType,
    ProviderTypeSpec,
    normalize_provider_type,
)

logger = get_logger(__name__)

ADAPTER_CLASSES: dict[ProviderType, type[ProviderAdapter]] = {
    ProviderType.CHAT_COMPLETION: ChatCompletionAdapter,
    ProviderType.MESSAGE_API: MessageApiAdapter,
    ProviderType.GENERATIVE_CONTENT: GenerativeContentAdapter,
    ProviderType.GENERIC_JSON: GenericJsonAdapter,
}


def build_adapter(
    spec: ProviderTypeSpec,
    client: httpx.AsyncClient,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> ProviderAdapter:
    """Construct the adapter for a resolved provider type.

    Args:
        spec: Resolved variant and default model.
        client: Shared httpx.AsyncClient.
        timeout_s: Per-request timeout.

    Returns:
        A ready adapter instance.
    """
    adapter_cls = ADAPTER_CLASSES[spec.variant]
    return adapter_cls(client, timeout_s=timeout_s, default_model=spec.default_model)


class ProviderRouter:
    """Routes reply requests to the adapter matching a provider's type.

    Adapters are stateless apart from the shared client, so one instance per
    accepted type name is built up front and reused for every call.
    """

    def __init__(self, client: httpx.AsyncClient, *, timeout_s: float = DEFAULT_TIMEOUT_S):
        """Initialize router with shared HTTP client.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            timeout_s: Timeout applied to every provider request.
        """
        self._client = client
        self._adapters: dict[str, ProviderAdapter] = {
            name: build_adapter(spec, client, timeout_s=timeout_s)
            for name, spec in PROVIDER_TYPES.items()
        }

    def resolve_adapter(self, provider_type: str) -> ProviderAdapter:
        """Get the adapter for a provider type name.

        Args:
            provider_type: Variant name or vendor alias (case-insensitive).

        Returns:
            The adapter instance for the type.

        Raises:
            UnknownProviderTypeError: If no adapter handles the type.
        """
        adapter = self._adapters.get(normalize_provider_type(provider_type))
        if adapter is None:
            raise UnknownProviderTypeError(provider_type)
        return adapter

    def is_supported(self, provider_type: str) -> bool:
        """Check whether a provider type name has an adapter."""
        return normalize_provider_type(provider_type) in self._adapters

    async def generate_reply(self, provider: ProviderConfig, prompt: str) -> str | None:
        """Ask a configured provider for a reply.

        Args:
            provider: The provider record to call.
            prompt: The rendered prompt.

        Returns:
            Reply text, or None if the provider is incomplete or the call failed.
        """
        if not provider.is_complete:
            logger.error(
                "provider.config.incomplete",
                provider_id=provider.id,
                has_endpoint=bool(provider.endpoint),
                has_credential=bool(provider.credential),
            )
            return None

        adapter = self.resolve_adapter(provider.type)
        logger.info(
            "provider.selected",
            provider_id=provider.id,
            provider_type=adapter.provider_type.value,
        )
        return await adapter.call(provider.endpoint, provider.credential, provider.model, prompt)
