"""Message enrichment pipeline.

Runs once per newly created chat message:

1. Guard: bot-authored messages stop here (no reply loops)
2. Resolve receiver language ("en" on any lookup failure)
3. Translate original text into the receiver language
4. Merge detected language / translation onto the message (skipped if empty)
5. Notify the receiver of the original message
6. Decide whether the assistant should reply
7. If so: resolve the active provider, call its adapter, fall back to a fixed
   reply when nothing came back, store the assistant message in the same chat
8. Notify the receiver of the assistant message

Invariants:
- Strictly sequential, no retries between stages
- Every external step is fault-isolated: a failure is logged and the next
  step still runs (only the step 1 guard short-circuits)
- The triggering message is only ever merge-updated with enrichment fields;
  the assistant reply is a new message
- No DB session is held across a network call
- Store calls are synchronous and run in the threadpool, never on the event loop

Duplicate delivery of the same creation event re-runs the pipeline: the merge
is idempotent, but the notification and assistant reply are sent again.
"""

import time
from dataclasses import dataclass

import httpx
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from courier.config import Settings
from courier.logging import bind_message_context, clear_message_context, get_logger
from courier.services.google_credentials import get_default_token_provider
from courier.services.assistant_trigger import should_respond
from courier.services.notifications import (
    FcmPushClient,
    NotificationDispatcher,
    NotificationPayload,
)
from courier.services.providers import ProviderRouter, resolve_active_provider
from courier.services.redact import hash_text, safe_kv
from courier.services.stores import (
    MessageStore,
    ProviderStore,
    SqlMessageStore,
    SqlProviderStore,
    SqlUserStore,
    UserStore,
)
from courier.services.translation import (
    EMPTY_ENRICHMENT,
    EnrichmentResult,
    GoogleTranslationClient,
    TranslationStage,
)
from courier.services.types import DEFAULT_LANGUAGE, MessageEvent

logger = get_logger(__name__)

ASSISTANT_NOTIFICATION_TITLE = "Assistant"
MESSAGE_NOTIFICATION_TITLE = "New message"


@dataclass(frozen=True)
class PipelineDeps:
    """Everything the pipeline talks to, built once per process.

    Attributes:
        providers: Provider configuration store
        messages: Chat message store
        users: User profile store
        translation: Translation stage (may be disabled)
        notifier: Push notification dispatcher
        provider_router: Adapter selection for the active provider
        fallback_reply: Assistant reply used when no provider produced text
    """

    providers: ProviderStore
    messages: MessageStore
    users: UserStore
    translation: TranslationStage
    notifier: NotificationDispatcher
    provider_router: ProviderRouter
    fallback_reply: str


def build_pipeline_deps(
    settings: Settings,
    client: httpx.AsyncClient,
    session_factory: sessionmaker[Session],
) -> PipelineDeps:
    """Wire the SQL stores and HTTP-backed clients from settings.

    Args:
        settings: Application settings.
        client: Shared httpx.AsyncClient (lifetime owned by the caller).
        session_factory: Database session factory.

    Returns:
        PipelineDeps ready for process_message_created().
    """
    users = SqlUserStore(session_factory)

    token_provider = None
    if settings.translation_enabled or settings.notifications_enabled:
        token_provider = get_default_token_provider()

    translation_client = None
    if settings.translation_enabled:
        translation_client = GoogleTranslationClient(
            client,
            project_id=settings.gcloud_project_id,  # type: ignore[arg-type]
            token_provider=token_provider,  # type: ignore[arg-type]
            timeout_s=settings.outbound_timeout_s,
        )

    push_client = None
    if settings.notifications_enabled:
        push_client = FcmPushClient(
            client,
            project_id=settings.fcm_project_id,  # type: ignore[arg-type]
            token_provider=token_provider,  # type: ignore[arg-type]
            timeout_s=settings.outbound_timeout_s,
        )

    return PipelineDeps(
        providers=SqlProviderStore(session_factory),
        messages=SqlMessageStore(session_factory),
        users=users,
        translation=TranslationStage(translation_client),
        notifier=NotificationDispatcher(users, push_client),
        provider_router=ProviderRouter(client, timeout_s=settings.outbound_timeout_s),
        fallback_reply=settings.assistant_fallback_reply,
    )


def create_http_client() -> httpx.AsyncClient:
    """Pooled client shared by adapters, translation and push delivery.

    Per-request timeouts are set by each caller from OUTBOUND_TIMEOUT_S.
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )


def build_assistant_prompt(text: str) -> str:
    """Render the prompt sent to the provider for an inbound message."""
    return f"User message: {text}\nPlease provide a professional assistant reply."


def enrichment_update(result: EnrichmentResult, receiver_language: str) -> dict[str, str]:
    """Fields to merge onto the message for an enrichment result (empty if nothing)."""
    updates: dict[str, str] = {}
    if result.original_language:
        updates["original_language"] = result.original_language
    if result.translated_text:
        updates["translated_text"] = result.translated_text
        updates["translated_language"] = receiver_language
    return updates


async def process_message_created(event: MessageEvent, deps: PipelineDeps) -> None:
    """Run the enrichment pipeline for one newly created message.

    Args:
        event: The created message.
        deps: Pipeline collaborators.
    """
    if event.is_assistant_authored:
        logger.debug("pipeline.skipped_assistant_message", message_id=event.message_id)
        return

    bind_message_context(event.chat_id, event.message_id)
    start = time.monotonic()
    try:
        await _run(event, deps)
    finally:
        logger.info(
            "pipeline.finished",
            latency_ms=int((time.monotonic() - start) * 1000),
        )
        clear_message_context()


async def _run(event: MessageEvent, deps: PipelineDeps) -> None:
    text = event.original_text or ""
    logger.info(
        "pipeline.started",
        **safe_kv(text_chars=len(text), text_sha256=hash_text(text)),
    )

    receiver_language = await _resolve_receiver_language(event.receiver_id, deps)

    try:
        enrichment = await deps.translation.enrich(text, receiver_language)
    except Exception as e:
        logger.error("pipeline.translate.failed", error_type=type(e).__name__)
        enrichment = EMPTY_ENRICHMENT

    updates = enrichment_update(enrichment, receiver_language)
    if updates:
        try:
            await run_in_threadpool(
                deps.messages.merge_update, event.chat_id, event.message_id, updates
            )
            logger.info("pipeline.enrichment.saved", updated_fields=sorted(updates))
        except Exception as e:
            logger.error("pipeline.enrichment.save_failed", error_type=type(e).__name__)

    await deps.notifier.notify(
        event.receiver_id,
        NotificationPayload(
            title=MESSAGE_NOTIFICATION_TITLE,
            body=text,
            data={"chatId": event.chat_id, "messageId": event.message_id},
        ),
    )

    if not should_respond(text):
        return

    reply = await _generate_reply(build_assistant_prompt(text), deps)
    if not reply:
        logger.info("pipeline.assistant.fallback")
        reply = deps.fallback_reply

    try:
        assistant_message_id = await run_in_threadpool(
            deps.messages.create_assistant_message,
            event.chat_id,
            receiver_id=event.receiver_id,
            text=reply,
            language=receiver_language,
        )
    except Exception as e:
        logger.error("pipeline.assistant.save_failed", error_type=type(e).__name__)
        return

    logger.info("pipeline.assistant.saved", assistant_message_id=assistant_message_id)

    await deps.notifier.notify(
        event.receiver_id,
        NotificationPayload(
            title=ASSISTANT_NOTIFICATION_TITLE,
            body=reply,
            data={"chatId": event.chat_id, "messageId": assistant_message_id},
        ),
    )


async def _resolve_receiver_language(receiver_id: str, deps: PipelineDeps) -> str:
    """Receiver's preferred language, "en" when unknown or on error."""
    try:
        user = await run_in_threadpool(deps.users.get, receiver_id)
    except Exception as e:
        logger.error("pipeline.receiver_lookup.failed", error_type=type(e).__name__)
        return DEFAULT_LANGUAGE
    if user is None or not user.language:
        return DEFAULT_LANGUAGE
    return user.language


async def _generate_reply(prompt: str, deps: PipelineDeps) -> str | None:
    """Ask the active provider for a reply; None if there is none or it failed."""
    try:
        provider = await run_in_threadpool(resolve_active_provider, deps.providers)
        if provider is None:
            return None
        return await deps.provider_router.generate_reply(provider, prompt)
    except Exception as e:
        logger.error("pipeline.assistant.provider_failed", error_type=type(e).__name__)
        return None
