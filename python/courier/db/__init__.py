"""Database module for Courier.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from courier.db.engine import create_db_engine, get_engine
from courier.db.models import (
    PIPELINE_CONFIG_ID,
    Base,
    ChatMessage,
    MessageStatus,
    PipelineConfig,
    Provider,
    SenderRole,
    UserProfile,
)
from courier.db.session import create_session_factory, get_session_factory, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "get_session_factory",
    "transaction",
    # Base
    "Base",
    # Enums
    "SenderRole",
    "MessageStatus",
    "PIPELINE_CONFIG_ID",
    # Models
    "Provider",
    "PipelineConfig",
    "UserProfile",
    "ChatMessage",
]
