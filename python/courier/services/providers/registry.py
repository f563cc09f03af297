"""Active provider resolution.

The active provider is the first enabled record the provider store returns.
Ordering is the store's responsibility; the SQL store orders by creation time,
so the oldest enabled provider wins. No enabled record is a normal state
("no assistant available"), not an error.
"""

from typing import TYPE_CHECKING

from courier.logging import get_logger
from courier.services.providers.types import ProviderConfig

if TYPE_CHECKING:  # stores imports ProviderConfig from this package
    from courier.services.stores import ProviderStore

logger = get_logger(__name__)


def resolve_active_provider(store: "ProviderStore") -> ProviderConfig | None:
    """Return the first enabled provider, or None if none is enabled.

    Args:
        store: Provider configuration store.

    Raises:
        UnknownProviderTypeError: If the selected record names an unknown type.
    """
    enabled = store.list_enabled(limit=1)
    if not enabled:
        logger.info("provider.none_enabled")
        return None

    provider = enabled[0]
    if not provider.enabled:
        # A store that ignores the filter must not leak a disabled record
        logger.error("provider.store_returned_disabled", provider_id=provider.id)
        return None

    return provider
