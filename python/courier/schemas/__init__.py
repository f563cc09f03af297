"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from courier.schemas.messages import MessageCreate, MessageOut
from courier.schemas.providers import (
    DefaultProviderIn,
    PipelineConfigOut,
    ProviderCreate,
    ProviderOut,
    ProviderUpdate,
)

__all__ = [
    # Messages
    "MessageCreate",
    "MessageOut",
    # Providers
    "DefaultProviderIn",
    "PipelineConfigOut",
    "ProviderCreate",
    "ProviderOut",
    "ProviderUpdate",
]
