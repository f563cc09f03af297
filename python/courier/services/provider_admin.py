"""Provider admin service layer.

Handles provider configuration management for the admin API and CLI:
- List / get providers (credential never leaves this layer)
- Add a provider (type validated against variants and vendor aliases)
- Partial update, enable/disable, delete
- Read the pipeline config and set the advisory default provider

Routes and the CLI call exactly one function here per operation.
Errors are raised as ApiError so both surfaces report them the same way.
"""

from courier.errors import ApiError, ApiErrorCode, NotFoundError
from courier.logging import get_logger
from courier.schemas.providers import (
    PipelineConfigOut,
    ProviderCreate,
    ProviderOut,
    ProviderUpdate,
)
from courier.services.providers import (
    UnknownProviderTypeError,
    resolve_active_provider,
    resolve_provider_type,
)
from courier.services.stores import ProviderStore

logger = get_logger(__name__)


def _not_found(provider_id: str) -> NotFoundError:
    return NotFoundError(ApiErrorCode.E_PROVIDER_NOT_FOUND, f"Provider {provider_id} not found")


def list_providers(store: ProviderStore) -> list[ProviderOut]:
    """List all providers, oldest first.

    Args:
        store: Provider store.

    Returns:
        List of ProviderOut (no credentials).
    """
    return [ProviderOut.from_config(p) for p in store.list_all()]


def get_provider(store: ProviderStore, provider_id: str) -> ProviderOut:
    """Get one provider.

    Raises:
        NotFoundError: E_PROVIDER_NOT_FOUND if it does not exist.
    """
    provider = store.get(provider_id)
    if provider is None:
        raise _not_found(provider_id)
    return ProviderOut.from_config(provider)


def create_provider(store: ProviderStore, body: ProviderCreate) -> ProviderOut:
    """Add a provider.

    Args:
        store: Provider store.
        body: Validated request body.

    Returns:
        The created provider.

    Raises:
        ApiError: E_PROVIDER_TYPE_INVALID if the type is not a known variant or alias.
    """
    try:
        resolve_provider_type(body.type)
    except UnknownProviderTypeError as e:
        raise ApiError(ApiErrorCode.E_PROVIDER_TYPE_INVALID, str(e)) from e

    provider = store.create(
        type=body.type,
        name=body.name,
        endpoint=body.endpoint,
        credential=body.credential,
        model=body.model,
        enabled=body.enabled,
        settings=body.settings,
    )
    return ProviderOut.from_config(provider)


def update_provider(store: ProviderStore, provider_id: str, body: ProviderUpdate) -> ProviderOut:
    """Apply a partial update to a provider.

    Only fields explicitly present in the body are written. An empty body
    is a no-op that still returns the current record.

    Raises:
        NotFoundError: E_PROVIDER_NOT_FOUND if it does not exist.
    """
    fields = body.model_dump(exclude_unset=True)
    # Explicit null for required fields means "leave unchanged"
    for key in ("name", "endpoint", "credential", "enabled", "settings"):
        if key in fields and fields[key] is None:
            del fields[key]

    if not fields:
        return get_provider(store, provider_id)

    provider = store.update(provider_id, fields)
    if provider is None:
        raise _not_found(provider_id)
    return ProviderOut.from_config(provider)


def set_provider_enabled(store: ProviderStore, provider_id: str, enabled: bool) -> ProviderOut:
    """Enable or disable a provider."""
    return update_provider(store, provider_id, ProviderUpdate(enabled=enabled))


def delete_provider(store: ProviderStore, provider_id: str) -> None:
    """Delete a provider.

    If it was the default provider, the default is cleared.

    Raises:
        NotFoundError: E_PROVIDER_NOT_FOUND if it does not exist.
    """
    if not store.delete(provider_id):
        raise _not_found(provider_id)

    if store.get_pipeline_config().default_provider == provider_id:
        store.set_default_provider(None)
        logger.info("pipeline_config.default_provider_cleared", provider_id=provider_id)


def get_pipeline_config(store: ProviderStore) -> PipelineConfigOut:
    """Read the pipeline config together with the provider the pipeline would use now."""
    config = store.get_pipeline_config()
    active = resolve_active_provider(store)
    return PipelineConfigOut(
        default_provider=config.default_provider,
        active_provider=active.id if active else None,
    )


def set_default_provider(store: ProviderStore, provider_id: str | None) -> PipelineConfigOut:
    """Record the advisory default provider (None clears it).

    Raises:
        NotFoundError: E_PROVIDER_NOT_FOUND if provider_id names no provider.
    """
    if provider_id is not None and store.get(provider_id) is None:
        raise _not_found(provider_id)
    store.set_default_provider(provider_id)
    return get_pipeline_config(store)
