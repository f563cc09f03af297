"""Celery worker entrypoint.

Run with: celery -A apps.worker.main:celery_app worker -Q pipeline,default --loglevel=info

This module imports the Celery app and explicitly registers all tasks.
Task definitions are in the courier.tasks package - no autodiscovery.

Logging Convention:
- All task log entries include request_id, task_name, task_id when available
- Pipeline entries additionally carry chat_id and message_id
- Tasks accept `request_id: str | None = None` for correlation with the API

Queue Configuration:
- pipeline: Message enrichment (translation, notifications, assistant reply)
- default: General background tasks
"""

from celery.signals import worker_process_init

from courier.celery import celery_app
from courier.logging import configure_logging, get_logger

# =============================================================================
# Task Registration (explicit imports - no autodiscovery)
# =============================================================================

from courier.tasks import process_message_created  # noqa: F401, E402

# =============================================================================
# Worker Lifecycle
# =============================================================================


@worker_process_init.connect
def setup_worker_logging(**kwargs):
    """Configure structlog when worker process starts.

    Worker logs use the same JSON structured format as the FastAPI application.
    """
    configure_logging()
    logger = get_logger(__name__)
    logger.info("celery_worker_started", queue="pipeline")


# Export celery_app for Celery to find
# Command: celery -A apps.worker.main:celery_app worker ...
__all__ = ["celery_app"]
