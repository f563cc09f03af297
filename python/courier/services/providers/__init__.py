"""Provider adapter layer for the assistant reply.

This package gives a uniform prompt -> reply contract over heterogeneous
language-model backends:

- Four adapter variants (chat-completion, message-api, generative-content,
  generic-json) selected by the provider record's type
- Vendor aliases (openai, deepseek, claude, anthropic, gemini, custom)
- Failure classification for logging
- Active provider resolution from the provider store

Usage:
    from courier.services.providers import ProviderRouter, resolve_active_provider

    router = ProviderRouter(httpx_client, timeout_s=8)
    provider = resolve_active_provider(provider_store)
    reply = await router.generate_reply(provider, "Hello!") if provider else None

Rules:
- No retries inside adapters
- No DB access inside adapters
- No logging of credentials, prompts or replies
- Adapters return None on any failure; they never raise to the caller
"""

from courier.services.providers.adapter import ProviderAdapter
from courier.services.providers.errors import (
    ProviderError,
    ProviderErrorClass,
    UnknownProviderTypeError,
    classify_provider_error,
)
from courier.services.providers.registry import resolve_active_provider
from courier.services.providers.router import ProviderRouter, build_adapter
from courier.services.providers.types import (
    PROVIDER_TYPES,
    ProviderConfig,
    ProviderType,
    ProviderTypeSpec,
    resolve_provider_type,
)

__all__ = [
    # Core types
    "ProviderConfig",
    "ProviderType",
    "ProviderTypeSpec",
    "PROVIDER_TYPES",
    "resolve_provider_type",
    # Adapters
    "ProviderAdapter",
    "ProviderRouter",
    "build_adapter",
    # Registry
    "resolve_active_provider",
    # Errors
    "ProviderError",
    "ProviderErrorClass",
    "UnknownProviderTypeError",
    "classify_provider_error",
]
