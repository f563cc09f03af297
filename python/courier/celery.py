"""Celery application configuration.

Central configuration for Celery used by both API (for enqueuing)
and worker (for executing tasks).

Usage:
    from courier.celery import celery_app

    # Enqueue task:
    from courier.tasks import process_message_created
    process_message_created.apply_async(
        args=[chat_id, message_id], kwargs={"request_id": request_id}
    )
"""

from celery import Celery

from courier.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery("courier")

# Configure from settings
celery_app.conf.broker_url = settings.effective_celery_broker_url
celery_app.conf.result_backend = settings.effective_celery_result_backend

# Task configuration
celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.timezone = "UTC"
celery_app.conf.enable_utc = True

# Queue routing for pipeline tasks
celery_app.conf.task_routes = {
    "process_message_created": {"queue": "pipeline"},
}

# Default queue
celery_app.conf.task_default_queue = "default"

# For testing: allow eager mode (synchronous execution)
celery_app.conf.task_always_eager = False
