"""FastAPI dependencies for route handlers.

Stores are built from the session factory on app state so tests can swap
the database without touching module globals.
"""

from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker

from courier.db.session import get_session_factory
from courier.services.pipeline import PipelineDeps
from courier.services.stores import SqlMessageStore, SqlProviderStore

__all__ = [
    "get_message_store",
    "get_pipeline_deps",
    "get_provider_store",
    "get_request_session_factory",
]


def get_request_session_factory(request: Request) -> sessionmaker[Session]:
    """Session factory for this app (app.state override, else the default)."""
    factory = getattr(request.app.state, "session_factory", None)
    return factory or get_session_factory()


def get_provider_store(request: Request) -> SqlProviderStore:
    """Provider store bound to the app's session factory."""
    return SqlProviderStore(get_request_session_factory(request))


def get_message_store(request: Request) -> SqlMessageStore:
    """Message store bound to the app's session factory."""
    return SqlMessageStore(get_request_session_factory(request))


def get_pipeline_deps(request: Request) -> PipelineDeps:
    """Get the in-process pipeline dependencies from app state.

    Built at app startup around the shared httpx.AsyncClient; used when
    messages are processed in-process instead of by the worker.

    Args:
        request: The incoming request (provides access to app.state)

    Returns:
        The shared PipelineDeps instance.
    """
    return request.app.state.pipeline_deps
