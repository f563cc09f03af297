"""Pipeline config routes.

- GET /config: Advisory default provider and the provider currently in use
- PUT /config/default-provider: Set or clear the advisory default

The pipeline always uses the oldest enabled provider; default_provider is
recorded for administrators and reported next to active_provider.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from courier.api.deps import get_provider_store
from courier.responses import success_response
from courier.schemas.providers import DefaultProviderIn
from courier.services import provider_admin
from courier.services.stores import SqlProviderStore

router = APIRouter(tags=["config"])


@router.get("/config")
def get_config(store: Annotated[SqlProviderStore, Depends(get_provider_store)]) -> dict:
    """Read the pipeline config.

    Returns:
        {"data": {"default_provider": ..., "active_provider": ...}}
    """
    config = provider_admin.get_pipeline_config(store)
    return success_response(config.model_dump(mode="json"))


@router.put("/config/default-provider")
def set_default_provider(
    body: DefaultProviderIn,
    store: Annotated[SqlProviderStore, Depends(get_provider_store)],
) -> dict:
    """Set (or clear, with null) the advisory default provider.

    Errors:
        E_PROVIDER_NOT_FOUND (404): provider_id names no provider
    """
    config = provider_admin.set_default_provider(store, body.provider_id)
    return success_response(config.model_dump(mode="json"))
