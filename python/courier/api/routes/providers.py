"""Provider admin routes.

Routes are transport-only: each calls exactly one service function.

- GET /providers: List providers (no credentials)
- POST /providers: Add a provider
- GET /providers/{provider_id}: Get one provider
- PATCH /providers/{provider_id}: Partial update (incl. enable/disable)
- DELETE /providers/{provider_id}: Remove a provider

Response envelope: {"data": ...}
Error envelope: {"error": {"code": "...", "message": "...", "request_id": "..."}}

Security invariants:
- Responses never include the credential
- Credentials are never logged
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from courier.api.deps import get_provider_store
from courier.responses import success_response
from courier.schemas.providers import ProviderCreate, ProviderUpdate
from courier.services import provider_admin
from courier.services.stores import SqlProviderStore

router = APIRouter(tags=["providers"])

Store = Annotated[SqlProviderStore, Depends(get_provider_store)]


@router.get("/providers")
def list_providers(store: Store) -> dict:
    """List all providers, oldest first.

    Returns:
        {"data": [ProviderOut, ...]}
    """
    providers = provider_admin.list_providers(store)
    return success_response([p.model_dump(mode="json") for p in providers])


@router.post("/providers", status_code=201)
def create_provider(body: ProviderCreate, store: Store) -> dict:
    """Add a provider.

    Returns:
        201 Created: {"data": ProviderOut}

    Errors:
        E_INVALID_REQUEST (400): Missing or blank required field
        E_PROVIDER_TYPE_INVALID (400): Unknown provider type
    """
    provider = provider_admin.create_provider(store, body)
    return success_response(provider.model_dump(mode="json"))


@router.get("/providers/{provider_id}")
def get_provider(provider_id: str, store: Store) -> dict:
    """Get one provider.

    Errors:
        E_PROVIDER_NOT_FOUND (404)
    """
    provider = provider_admin.get_provider(store, provider_id)
    return success_response(provider.model_dump(mode="json"))


@router.patch("/providers/{provider_id}")
def update_provider(provider_id: str, body: ProviderUpdate, store: Store) -> dict:
    """Update a provider. Only fields present in the body change.

    Errors:
        E_INVALID_REQUEST (400): Unknown or blank field
        E_PROVIDER_NOT_FOUND (404)
    """
    provider = provider_admin.update_provider(store, provider_id, body)
    return success_response(provider.model_dump(mode="json"))


@router.delete("/providers/{provider_id}", status_code=204)
def delete_provider(provider_id: str, store: Store) -> Response:
    """Delete a provider.

    Returns:
        204 No Content

    Errors:
        E_PROVIDER_NOT_FOUND (404)
    """
    provider_admin.delete_provider(store, provider_id)
    return Response(status_code=204)
