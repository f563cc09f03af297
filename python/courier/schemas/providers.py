"""Provider admin Pydantic schemas.

Request and response models for the provider and pipeline config endpoints.

- The credential is accepted on create/update but never returned
- Type names are validated against the known variants and vendor aliases
  in the service layer, so an unknown type yields E_PROVIDER_TYPE_INVALID
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from courier.services.providers.types import ProviderConfig


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class ProviderOut(BaseModel):
    """Response schema for a provider.

    SECURITY: credential is excluded. has_credential tells the admin whether
    one is stored.
    """

    id: str
    type: str
    name: str
    endpoint: str
    model: str | None = None
    enabled: bool
    settings: dict[str, Any] = Field(default_factory=dict)
    has_credential: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderOut":
        return cls(
            id=config.id,
            type=config.type,
            name=config.name,
            endpoint=config.endpoint,
            model=config.model,
            enabled=config.enabled,
            settings=dict(config.settings),
            has_credential=bool(config.credential),
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class ProviderCreate(BaseModel):
    """Request schema for adding a provider."""

    type: str = Field(..., description="Variant name or vendor alias (e.g. openai, custom)")
    name: str = Field(..., description="Display label")
    endpoint: str = Field(..., description="Request URL; may contain {model}")
    credential: str = Field(..., description="API key or token", repr=False)
    model: str | None = Field(default=None, description="Model override")
    enabled: bool = True
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", "name", "endpoint", "credential")
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Reject blank required fields."""
        return _strip_required(v)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str | None) -> str | None:
        """Blank model means "use the adapter default"."""
        return _blank_to_none(v)


class ProviderUpdate(BaseModel):
    """Request schema for a partial provider update.

    Only fields present in the request body are applied. The type of an
    existing provider cannot be changed; add a new provider instead.
    """

    name: str | None = None
    endpoint: str | None = None
    credential: str | None = Field(default=None, repr=False)
    model: str | None = None
    enabled: bool | None = None
    settings: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "endpoint", "credential")
    @classmethod
    def validate_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _strip_required(v)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str | None) -> str | None:
        """Blank model clears the override."""
        return _blank_to_none(v)


class DefaultProviderIn(BaseModel):
    """Request schema for setting the advisory default provider."""

    provider_id: str | None = None


class PipelineConfigOut(BaseModel):
    """Response schema for the pipeline config singleton."""

    default_provider: str | None = None
    active_provider: str | None = None
