"""Celery task running the enrichment pipeline for one stored message.

This task:
1. Loads the message by (chat_id, message_id)
2. Builds pipeline dependencies around a task-scoped httpx client
3. Runs the pipeline to completion

- max_retries=0: a retry would resend notifications and assistant replies
- A missing message is skipped, not failed (it may have been deleted)
- Stage failures never reach this task; the pipeline degrades per stage
"""

import asyncio

from sqlalchemy.orm import Session, sessionmaker

from courier.celery import celery_app
from courier.config import Settings, get_settings
from courier.db.session import get_session_factory
from courier.logging import clear_task_context, configure_task_logging, get_logger
from courier.services import pipeline
from courier.services.stores import SqlMessageStore

logger = get_logger(__name__)

TASK_NAME = "process_message_created"


@celery_app.task(bind=True, max_retries=0, name=TASK_NAME)
def process_message_created(
    self,
    chat_id: str,
    message_id: str,
    request_id: str | None = None,
) -> dict:
    """Run the pipeline for a newly created message.

    Args:
        chat_id: Chat the message belongs to.
        message_id: The created message.
        request_id: Optional request ID for log correlation.

    Returns:
        Dict with result status.
    """
    configure_task_logging(request_id=request_id, task_name=TASK_NAME, task_id=self.request.id)
    logger.info("process_message_created_started", chat_id=chat_id, message_id=message_id)

    try:
        result = asyncio.run(
            run_for_message(chat_id, message_id, get_settings(), get_session_factory())
        )
        logger.info(
            "process_message_created_completed",
            chat_id=chat_id,
            message_id=message_id,
            status=result["status"],
        )
        return result
    except Exception as e:
        logger.error(
            "process_message_created_failed",
            chat_id=chat_id,
            message_id=message_id,
            error_type=type(e).__name__,
        )
        raise
    finally:
        clear_task_context()


async def run_for_message(
    chat_id: str,
    message_id: str,
    settings: Settings,
    session_factory: sessionmaker[Session],
) -> dict:
    """Load the message and run the pipeline with a task-scoped HTTP client.

    Returns:
        {"status": "processed"} or {"status": "skipped", "reason": ...}
    """
    event = SqlMessageStore(session_factory).get(chat_id, message_id)
    if event is None:
        return {"status": "skipped", "reason": "message_not_found"}

    async with pipeline.create_http_client() as client:
        deps = pipeline.build_pipeline_deps(settings, client, session_factory)
        await pipeline.process_message_created(event, deps)

    return {"status": "processed"}
