"""Shared type definitions for the provider adapter layer.

- ProviderType: closed set of wire-format families an adapter can speak
- ProviderTypeSpec: variant + backend-specific default model for a type name
- ProviderConfig: one configured AI backend, validated at load time

Type names accepted in configuration are either the canonical variant names
("chat-completion", "message-api", "generative-content", "generic-json") or a
vendor alias ("openai", "deepseek", "claude", "anthropic", "gemini", "custom").
An unrecognized name fails ProviderConfig construction, never the call.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from courier.services.providers.errors import UnknownProviderTypeError

# Generation parameters shared by every variant that accepts them
DEFAULT_MAX_TOKENS = 150
DEFAULT_TEMPERATURE = 0.7


class ProviderType(str, Enum):
    """Wire-format families. Each maps to exactly one adapter class."""

    CHAT_COMPLETION = "chat-completion"
    MESSAGE_API = "message-api"
    GENERATIVE_CONTENT = "generative-content"
    GENERIC_JSON = "generic-json"


@dataclass(frozen=True)
class ProviderTypeSpec:
    """Resolved provider type.

    Attributes:
        variant: The adapter family handling this type
        default_model: Model used when the provider record has none (None = no model field)
    """

    variant: ProviderType
    default_model: str | None


PROVIDER_TYPES: dict[str, ProviderTypeSpec] = {
    # Canonical variant names
    ProviderType.CHAT_COMPLETION.value: ProviderTypeSpec(
        ProviderType.CHAT_COMPLETION, "gpt-3.5-turbo"
    ),
    ProviderType.MESSAGE_API.value: ProviderTypeSpec(
        ProviderType.MESSAGE_API, "claude-3-sonnet-20240229"
    ),
    ProviderType.GENERATIVE_CONTENT.value: ProviderTypeSpec(
        ProviderType.GENERATIVE_CONTENT, "gemini-pro"
    ),
    ProviderType.GENERIC_JSON.value: ProviderTypeSpec(ProviderType.GENERIC_JSON, None),
    # Vendor aliases
    "openai": ProviderTypeSpec(ProviderType.CHAT_COMPLETION, "gpt-3.5-turbo"),
    "deepseek": ProviderTypeSpec(ProviderType.CHAT_COMPLETION, "deepseek-chat"),
    "claude": ProviderTypeSpec(ProviderType.MESSAGE_API, "claude-3-sonnet-20240229"),
    "anthropic": ProviderTypeSpec(ProviderType.MESSAGE_API, "claude-3-sonnet-20240229"),
    "gemini": ProviderTypeSpec(ProviderType.GENERATIVE_CONTENT, "gemini-pro"),
    "custom": ProviderTypeSpec(ProviderType.GENERIC_JSON, None),
}


def normalize_provider_type(raw: str | None) -> str:
    """Lowercase and strip a configured type name."""
    return (raw or "").strip().lower()


def resolve_provider_type(raw: str | None) -> ProviderTypeSpec:
    """Resolve a configured type name to its variant and default model.

    Args:
        raw: Type name as stored on the provider record.

    Returns:
        The matching ProviderTypeSpec.

    Raises:
        UnknownProviderTypeError: If the name is not a variant or known alias.
    """
    spec = PROVIDER_TYPES.get(normalize_provider_type(raw))
    if spec is None:
        raise UnknownProviderTypeError(raw)
    return spec


@dataclass(frozen=True)
class ProviderConfig:
    """One configured AI backend.

    Attributes:
        id: Stable identifier assigned at creation
        type: Variant name or vendor alias (validated on construction)
        name: Display label
        endpoint: Request URL; may contain a "{model}" placeholder
        credential: Opaque secret (never logged, never repr'd)
        model: Optional model override
        enabled: Whether the record is eligible for selection
        settings: Free-form per-provider settings
        created_at: Creation timestamp
        updated_at: Last modification timestamp
    """

    id: str
    type: str
    name: str
    endpoint: str
    credential: str = field(repr=False)
    model: str | None = None
    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        """Fail fast on an unrecognized provider type."""
        resolve_provider_type(self.type)

    @property
    def type_spec(self) -> ProviderTypeSpec:
        """The resolved variant and default model for this record."""
        return resolve_provider_type(self.type)

    @property
    def is_complete(self) -> bool:
        """Whether endpoint and credential are both present."""
        return bool(self.endpoint and self.credential)
