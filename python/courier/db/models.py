"""SQLAlchemy ORM models for Courier.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are portable (PostgreSQL in deployment, SQLite in tests);
identifiers are text because providers and messages carry externally
meaningful ids.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class SenderRole(str, PyEnum):
    """Who authored a chat message.

    Messages authored by the bot never re-enter the enrichment pipeline.
    """

    user = "user"
    bot = "bot"


class MessageStatus(str, PyEnum):
    """Delivery status recorded on a chat message."""

    sent = "sent"
    delivered = "delivered"
    read = "read"


PIPELINE_CONFIG_ID = "config"


# =============================================================================
# Provider configuration
# =============================================================================


class Provider(Base):
    """One configured AI backend."""

    __tablename__ = "providers"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    endpoint: Mapped[str] = mapped_column(Text, nullable=False)
    credential: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("ix_providers_enabled_created", "enabled", "created_at"),)


class PipelineConfig(Base):
    """Singleton pipeline configuration row (id is always "config")."""

    __tablename__ = "pipeline_config"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=PIPELINE_CONFIG_ID)
    default_provider: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


# =============================================================================
# Users and messages
# =============================================================================


class UserProfile(Base):
    """Chat user profile as far as the pipeline needs it."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    language: Mapped[str | None] = mapped_column(Text, nullable=True)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    device_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def preferred_language(self) -> str | None:
        """settings.language, then language."""
        settings = self.settings or {}
        return settings.get("language") or self.language


class ChatMessage(Base):
    """A message inside a chat. Enrichment fields are filled in by the pipeline."""

    __tablename__ = "chat_messages"

    chat_id: Mapped[str] = mapped_column(Text, primary_key=True)
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    sender_id: Mapped[str] = mapped_column(Text, nullable=False)
    receiver_id: Mapped[str] = mapped_column(Text, nullable=False)
    sender_role: Mapped[str] = mapped_column(
        Text, nullable=False, default=SenderRole.user.value
    )
    original_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    original_language: Mapped[str | None] = mapped_column(Text, nullable=True)
    translated_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    translated_language: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=MessageStatus.sent.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (Index("ix_chat_messages_chat_created", "chat_id", "created_at"),)
