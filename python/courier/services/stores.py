"""Storage collaborators for the pipeline and the provider admin surface.

Protocols:
- ProviderStore: provider records + singleton pipeline config
- MessageStore: chat messages (create, read, merge-update)
- UserStore: read-only user profiles

SQL implementations open one short-lived session per operation, so no
transaction is ever held across a network call made by the pipeline.

Merge semantics:
- MessageStore.merge_update only touches enrichment fields; anything else in
  the update is rejected, so unrelated fields can never be overwritten
- Applying the same merge twice yields the same record
"""

from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from courier.db.models import (
    PIPELINE_CONFIG_ID,
    ChatMessage,
    MessageStatus,
    PipelineConfig,
    Provider,
    SenderRole,
    UserProfile,
    utcnow,
)
from courier.db.session import transaction
from courier.logging import get_logger
from courier.services.providers.errors import UnknownProviderTypeError
from courier.services.providers.types import ProviderConfig, normalize_provider_type
from courier.services.types import (
    ASSISTANT_SENDER_ID,
    MessageEvent,
    PipelineConfigRecord,
    UserRecord,
)

logger = get_logger(__name__)

ENRICHMENT_FIELDS = frozenset({"original_language", "translated_text", "translated_language"})
PROVIDER_UPDATABLE_FIELDS = frozenset(
    {"name", "endpoint", "credential", "model", "enabled", "settings"}
)


class MessageNotFoundError(LookupError):
    """Raised when a merge targets a message that does not exist."""

    def __init__(self, chat_id: str, message_id: str):
        self.chat_id = chat_id
        self.message_id = message_id
        super().__init__(f"Message {chat_id}/{message_id} not found")


def new_message_id() -> str:
    """Generate a fresh message id."""
    return uuid4().hex


def new_provider_id(provider_type: str) -> str:
    """Generate a provider id prefixed with its type, e.g. "openai-3f2a9c1b7d4e"."""
    return f"{normalize_provider_type(provider_type)}-{uuid4().hex[:12]}"


def _as_aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on read; treat naive timestamps as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# =============================================================================
# Protocols
# =============================================================================


class ProviderStore(Protocol):
    """Provider configuration records."""

    def create(
        self,
        *,
        type: str,
        name: str,
        endpoint: str,
        credential: str,
        model: str | None = None,
        enabled: bool = True,
        settings: dict[str, Any] | None = None,
    ) -> ProviderConfig: ...

    def get(self, provider_id: str) -> ProviderConfig | None: ...

    def list_all(self) -> list[ProviderConfig]: ...

    def list_enabled(self, limit: int | None = None) -> list[ProviderConfig]: ...

    def update(self, provider_id: str, fields: dict[str, Any]) -> ProviderConfig | None: ...

    def delete(self, provider_id: str) -> bool: ...

    def get_pipeline_config(self) -> PipelineConfigRecord: ...

    def set_default_provider(self, provider_id: str | None) -> PipelineConfigRecord: ...


class MessageStore(Protocol):
    """Chat messages."""

    def create(self, event: MessageEvent) -> MessageEvent: ...

    def get(self, chat_id: str, message_id: str) -> MessageEvent | None: ...

    def merge_update(self, chat_id: str, message_id: str, fields: dict[str, Any]) -> None: ...

    def create_assistant_message(
        self,
        chat_id: str,
        *,
        receiver_id: str,
        text: str,
        language: str | None,
    ) -> str: ...


class UserStore(Protocol):
    """Read-only user profiles."""

    def get(self, user_id: str) -> UserRecord | None: ...


# =============================================================================
# SQL implementations
# =============================================================================


def provider_to_config(row: Provider) -> ProviderConfig:
    """Convert an ORM row to a ProviderConfig.

    Raises:
        UnknownProviderTypeError: If the stored type is not recognized.
    """
    return ProviderConfig(
        id=row.id,
        type=row.type,
        name=row.name,
        endpoint=row.endpoint,
        credential=row.credential,
        model=row.model,
        enabled=row.enabled,
        settings=dict(row.settings or {}),
        created_at=_as_aware(row.created_at),
        updated_at=_as_aware(row.updated_at),
    )


def message_to_event(row: ChatMessage) -> MessageEvent:
    """Convert an ORM row to a MessageEvent."""
    return MessageEvent(
        chat_id=row.chat_id,
        message_id=row.id,
        sender_id=row.sender_id,
        receiver_id=row.receiver_id,
        original_text=row.original_text or "",
        sender_role=row.sender_role,
    )


class SqlProviderStore:
    """ProviderStore backed by the providers and pipeline_config tables."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def create(
        self,
        *,
        type: str,
        name: str,
        endpoint: str,
        credential: str,
        model: str | None = None,
        enabled: bool = True,
        settings: dict[str, Any] | None = None,
    ) -> ProviderConfig:
        now = utcnow()
        row = Provider(
            id=new_provider_id(type),
            type=normalize_provider_type(type),
            name=name,
            endpoint=endpoint,
            credential=credential,
            model=model or None,
            enabled=enabled,
            settings=dict(settings or {}),
            created_at=now,
            updated_at=now,
        )
        # Validate the type before anything is written
        config = provider_to_config(row)

        with self._session_factory() as db, transaction(db):
            db.add(row)

        logger.info("provider.created", provider_id=config.id, provider_type=config.type)
        return config

    def get(self, provider_id: str) -> ProviderConfig | None:
        with self._session_factory() as db:
            row = db.get(Provider, provider_id)
            return provider_to_config(row) if row else None

    def list_all(self) -> list[ProviderConfig]:
        """All readable providers, oldest first.

        Rows with an unrecognized type are skipped and logged so one bad
        record cannot take down the admin listing.
        """
        with self._session_factory() as db:
            rows = db.scalars(select(Provider).order_by(Provider.created_at, Provider.id)).all()
            configs = []
            for row in rows:
                try:
                    configs.append(provider_to_config(row))
                except UnknownProviderTypeError:
                    logger.warning(
                        "provider.unreadable_skipped",
                        provider_id=row.id,
                        provider_type=row.type,
                    )
            return configs

    def list_enabled(self, limit: int | None = None) -> list[ProviderConfig]:
        stmt = (
            select(Provider)
            .where(Provider.enabled.is_(True))
            .order_by(Provider.created_at, Provider.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_factory() as db:
            return [provider_to_config(row) for row in db.scalars(stmt).all()]

    def update(self, provider_id: str, fields: dict[str, Any]) -> ProviderConfig | None:
        unknown = set(fields) - PROVIDER_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        with self._session_factory() as db, transaction(db):
            row = db.get(Provider, provider_id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            # updated_at never moves backwards, even with clock skew
            previous = _as_aware(row.updated_at)
            now = utcnow()
            row.updated_at = max(now, previous) if previous else now
            config = provider_to_config(row)

        logger.info(
            "provider.updated",
            provider_id=provider_id,
            updated_fields=sorted(fields),
        )
        return config

    def delete(self, provider_id: str) -> bool:
        with self._session_factory() as db, transaction(db):
            row = db.get(Provider, provider_id)
            if row is None:
                return False
            db.delete(row)

        logger.info("provider.deleted", provider_id=provider_id)
        return True

    def get_pipeline_config(self) -> PipelineConfigRecord:
        with self._session_factory() as db:
            row = db.get(PipelineConfig, PIPELINE_CONFIG_ID)
            return PipelineConfigRecord(default_provider=row.default_provider if row else None)

    def set_default_provider(self, provider_id: str | None) -> PipelineConfigRecord:
        with self._session_factory() as db, transaction(db):
            row = db.get(PipelineConfig, PIPELINE_CONFIG_ID)
            if row is None:
                row = PipelineConfig(id=PIPELINE_CONFIG_ID)
                db.add(row)
            row.default_provider = provider_id
            row.updated_at = utcnow()

        logger.info("pipeline_config.default_provider_set", provider_id=provider_id)
        return PipelineConfigRecord(default_provider=provider_id)


class SqlMessageStore:
    """MessageStore backed by the chat_messages table."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def create(self, event: MessageEvent) -> MessageEvent:
        now = utcnow()
        row = ChatMessage(
            chat_id=event.chat_id,
            id=event.message_id,
            sender_id=event.sender_id,
            receiver_id=event.receiver_id,
            sender_role=event.sender_role or SenderRole.user.value,
            original_text=event.original_text or "",
            status=MessageStatus.sent.value,
            created_at=now,
            updated_at=now,
        )
        with self._session_factory() as db, transaction(db):
            db.add(row)
        return message_to_event(row)

    def get(self, chat_id: str, message_id: str) -> MessageEvent | None:
        with self._session_factory() as db:
            row = db.get(ChatMessage, (chat_id, message_id))
            return message_to_event(row) if row else None

    def get_record(self, chat_id: str, message_id: str) -> ChatMessage | None:
        """Return the raw row, including enrichment fields."""
        with self._session_factory() as db:
            return db.get(ChatMessage, (chat_id, message_id))

    def merge_update(self, chat_id: str, message_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - ENRICHMENT_FIELDS
        if unknown:
            raise ValueError(f"Only enrichment fields can be merged, got {sorted(unknown)}")
        if not fields:
            return

        with self._session_factory() as db, transaction(db):
            row = db.get(ChatMessage, (chat_id, message_id))
            if row is None:
                raise MessageNotFoundError(chat_id, message_id)
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = utcnow()

    def create_assistant_message(
        self,
        chat_id: str,
        *,
        receiver_id: str,
        text: str,
        language: str | None,
    ) -> str:
        message_id = new_message_id()
        now = utcnow()
        row = ChatMessage(
            chat_id=chat_id,
            id=message_id,
            sender_id=ASSISTANT_SENDER_ID,
            receiver_id=receiver_id,
            sender_role=SenderRole.bot.value,
            original_text=text,
            original_language=language,
            translated_text=None,
            translated_language=None,
            status=MessageStatus.sent.value,
            created_at=now,
            updated_at=now,
        )
        with self._session_factory() as db, transaction(db):
            db.add(row)
        return message_id


class SqlUserStore:
    """UserStore backed by the users table."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, user_id: str) -> UserRecord | None:
        with self._session_factory() as db:
            row = db.get(UserProfile, user_id)
            if row is None:
                return None
            return UserRecord(
                id=row.id,
                language=row.preferred_language,
                device_token=row.device_token,
            )
