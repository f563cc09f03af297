"""Celery tasks for Courier.

Tasks are explicitly imported here to register them with Celery.
No autodiscovery - all tasks must be imported in this module.

Usage in API (enqueue):
    from courier.tasks import process_message_created
    process_message_created.apply_async(
        args=[chat_id, message_id],
        kwargs={"request_id": request_id},
    )
"""

from courier.tasks.process_message import process_message_created

__all__ = ["process_message_created"]
