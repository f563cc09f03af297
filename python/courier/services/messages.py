"""Chat message ingestion.

Persisting a message is the "message created" event: once the row exists the
enrichment pipeline is dispatched for it.

Dispatch:
- A Celery broker is configured (and not in the test environment): the
  process_message_created task is enqueued with the request id for log
  correlation
- Otherwise, or when enqueueing fails: the caller runs the pipeline
  in-process (the API schedules it as a background task)
"""

from courier.config import Environment, get_settings
from courier.logging import get_logger
from courier.schemas.messages import MessageCreate, MessageOut
from courier.services.stores import MessageStore, new_message_id
from courier.services.types import MessageEvent

logger = get_logger(__name__)

DISPATCH_WORKER = "worker"
DISPATCH_IN_PROCESS = "in_process"


def create_message(store: MessageStore, chat_id: str, body: MessageCreate) -> MessageEvent:
    """Persist a new message with a fresh id.

    Args:
        store: Message store.
        chat_id: Chat the message belongs to.
        body: Validated request body.

    Returns:
        The stored message as a pipeline event.
    """
    event = MessageEvent(
        chat_id=chat_id,
        message_id=new_message_id(),
        sender_id=body.sender_id,
        receiver_id=body.receiver_id,
        original_text=body.text,
        sender_role=body.sender_role,
    )
    stored = store.create(event)
    logger.info("message.created", chat_id=chat_id, message_id=stored.message_id)
    return stored


def enqueue_pipeline_task(event: MessageEvent, request_id: str | None) -> bool:
    """Enqueue the process_message_created Celery task.

    Returns:
        True if the task was enqueued, False if the caller should run the
        pipeline itself.
    """
    settings = get_settings()

    if settings.courier_env == Environment.TEST:
        logger.debug("skipping_task_enqueue", reason="test_environment")
        return False

    if not settings.effective_celery_broker_url:
        logger.debug("skipping_task_enqueue", reason="no_broker")
        return False

    try:
        from courier.tasks import process_message_created

        process_message_created.apply_async(
            args=[event.chat_id, event.message_id],
            kwargs={"request_id": request_id},
        )
        logger.info(
            "pipeline_task_enqueued",
            chat_id=event.chat_id,
            message_id=event.message_id,
        )
        return True
    except Exception as e:
        logger.warning(
            "pipeline_task_enqueue_failed",
            chat_id=event.chat_id,
            message_id=event.message_id,
            error_type=type(e).__name__,
        )
        return False


def message_out(event: MessageEvent, dispatch: str) -> MessageOut:
    """Response body for a created message."""
    return MessageOut(
        chat_id=event.chat_id,
        message_id=event.message_id,
        sender_id=event.sender_id,
        receiver_id=event.receiver_id,
        sender_role=event.sender_role,
        dispatch=dispatch,
    )
