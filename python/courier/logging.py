"""Structured logging configuration using structlog.

Provides JSON-formatted logs with consistent context including:
- request_id: Correlation ID for request tracing
- chat_id / message_id: The message currently flowing through the pipeline
- task_name / task_id: Celery task context
- timestamp: ISO8601 formatted timestamp

Usage:
    from courier.logging import get_logger, configure_logging

    # Configure once at startup
    configure_logging()

    # Get a logger for a module
    logger = get_logger(__name__)
    logger.info("something_happened", extra_field="value")

Pipeline Logging:
    from courier.logging import bind_message_context, clear_message_context

    bind_message_context(chat_id="c1", message_id="m1")
    logger.info("pipeline.started")  # includes chat_id and message_id
    clear_message_context()
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Context variables for request-scoped logging
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
task_name_var: ContextVar[str | None] = ContextVar("task_name", default=None)
task_id_var: ContextVar[str | None] = ContextVar("task_id", default=None)

# Pipeline correlation
chat_id_var: ContextVar[str | None] = ContextVar("chat_id", default=None)
message_id_var: ContextVar[str | None] = ContextVar("message_id", default=None)


def add_request_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Add request context to all log entries.

    Injects all non-None ContextVar values into the log event dict.
    Explicitly passed fields win over context values.
    """
    context = {
        "request_id": request_id_var.get(),
        "task_name": task_name_var.get(),
        "task_id": task_id_var.get(),
        "chat_id": chat_id_var.get(),
        "message_id": message_id_var.get(),
    }
    for key, value in context.items():
        if value and key not in event_dict:
            event_dict[key] = value

    return event_dict


def configure_logging(json_format: bool = True) -> None:
    """Configure structlog for the application.

    Args:
        json_format: If True, output JSON logs. If False, output console-friendly logs.
    """
    # Shared processors for both stdlib and structlog loggers
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def set_request_id(request_id: str | None) -> None:
    """Set the request correlation ID for the current context."""
    request_id_var.set(request_id)


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return request_id_var.get()


def bind_message_context(chat_id: str | None, message_id: str | None) -> None:
    """Attach the message being processed to every subsequent log entry."""
    chat_id_var.set(chat_id)
    message_id_var.set(message_id)


def clear_message_context() -> None:
    """Clear pipeline correlation fields."""
    chat_id_var.set(None)
    message_id_var.set(None)


def configure_task_logging(
    request_id: str | None = None,
    task_name: str | None = None,
    task_id: str | None = None,
) -> None:
    """Configure logging context for a Celery task.

    Call this at the start of each Celery task to set up proper logging context.

    Args:
        request_id: The request correlation ID (passed from the API when the task was enqueued).
        task_name: The name of the Celery task.
        task_id: The Celery task ID (from self.request.id).
    """
    request_id_var.set(request_id)
    task_name_var.set(task_name)
    task_id_var.set(task_id)


def clear_task_context() -> None:
    """Clear task context at the end of a task."""
    request_id_var.set(None)
    task_name_var.set(None)
    task_id_var.set(None)
    clear_message_context()
