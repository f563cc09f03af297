"""Pytest configuration and fixtures for Courier tests.

Test isolation strategy:
- Every test that touches the database gets its own in-memory SQLite
  database (StaticPool, so all sessions share the one connection)
- Settings are read from the environment defaults below; the cache is
  cleared around every test
- Outbound HTTP is mocked with respx; no test talks to a real provider
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

os.environ.setdefault("COURIER_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import httpx
import pytest
import structlog
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from courier.app import add_request_id_middleware, create_app
from courier.config import clear_settings_cache
from courier.db.models import Base
from courier.db.session import create_session_factory
from courier.logging import add_request_context
from courier.services.stores import SqlMessageStore, SqlProviderStore, SqlUserStore

# Loggers must re-read the config so log_sink can swap processors per test
structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Settings are re-read from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def log_sink():
    """Configure structlog to capture events into a list.

    Returns a list that will contain all emitted log event dicts, with the
    context vars (request_id, chat_id, message_id, ...) already injected.
    After the test, structlog is reset to normal.
    """
    events: list[dict] = []
    original_config = structlog.get_config()

    def capture_processor(logger, method_name, event_dict):
        events.append({**event_dict, "level": method_name})
        raise structlog.DropEvent

    structlog.configure(
        processors=[add_request_context, capture_processor],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    yield events

    structlog.configure(**original_config)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite database with the full schema."""
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def provider_store(session_factory) -> SqlProviderStore:
    return SqlProviderStore(session_factory)


@pytest.fixture
def message_store(session_factory) -> SqlMessageStore:
    return SqlMessageStore(session_factory)


@pytest.fixture
def user_store(session_factory) -> SqlUserStore:
    return SqlUserStore(session_factory)


@pytest.fixture
def httpx_client():
    """Create an httpx AsyncClient for testing."""
    return httpx.AsyncClient()


@pytest.fixture
def app(session_factory):
    """App wired to the test database, with request-id middleware."""
    app = create_app(session_factory=session_factory)
    add_request_id_middleware(app, log_requests=False)
    return app


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """TestClient with lifespan (shared httpx client, pipeline deps) running."""
    with TestClient(app) as client:
        yield client
