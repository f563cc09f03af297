"""X-Request-ID middleware for request correlation.

This middleware:
- Accepts a well-formed incoming X-Request-ID or generates a new one
- Attaches the ID to request state and to the logging context
- Echoes the ID in response headers
- Logs one access entry per request

The same ID is passed to the worker when the pipeline task is enqueued, so
API and worker log entries for one message share a request_id.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from courier.logging import get_logger, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Alphanumeric plus dots, hyphens, underscores (covers UUIDs)
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the incoming ID if well-formed (lowercased if it is a UUID), else a new UUID4."""
    if incoming and VALID_REQUEST_ID_PATTERN.match(incoming):
        try:
            return str(uuid.UUID(incoming))
        except ValueError:
            return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware for X-Request-ID handling and access logging.

    Args:
        app: The ASGI application.
        log_requests: If True, log access entries for each request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()

        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                logger.info(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                )
            return response

        except Exception:
            logger.exception("request_failed", method=request.method, path=request.url.path)
            raise

        finally:
            set_request_id(None)
