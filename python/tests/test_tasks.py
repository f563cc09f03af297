"""Tests for the process_message_created Celery task.

The task is executed eagerly with .apply(); the session factory is pointed
at the test database. No broker is involved.
"""

import pytest

from courier.config import get_settings
from courier.db.models import ChatMessage
from courier.logging import request_id_var, task_name_var
from courier.tasks import process_message as task_module
from courier.tasks import process_message_created
from tests.fakes import make_event


class TestRunForMessage:
    @pytest.mark.asyncio
    async def test_processes_stored_message(self, message_store, session_factory):
        message_store.create(make_event("Can you help?"))

        result = await task_module.run_for_message("c1", "m1", get_settings(), session_factory)

        assert result == {"status": "processed"}
        with session_factory() as db:
            bot_rows = db.query(ChatMessage).filter(ChatMessage.sender_role == "bot").all()
        assert len(bot_rows) == 1
        assert bot_rows[0].original_text == get_settings().assistant_fallback_reply

    @pytest.mark.asyncio
    async def test_missing_message_is_skipped(self, session_factory):
        result = await task_module.run_for_message("c1", "gone", get_settings(), session_factory)
        assert result == {"status": "skipped", "reason": "message_not_found"}


class TestProcessMessageCreatedTask:
    @pytest.fixture(autouse=True)
    def use_test_db(self, monkeypatch, session_factory):
        monkeypatch.setattr(task_module, "get_session_factory", lambda: session_factory)

    def test_apply_processes_message(self, message_store):
        message_store.create(make_event("Thanks!"))

        result = process_message_created.apply(
            args=["c1", "m1"], kwargs={"request_id": "req-123"}
        )

        assert result.successful()
        assert result.get() == {"status": "processed"}

    def test_apply_skips_missing_message(self):
        result = process_message_created.apply(args=["c1", "missing"])
        assert result.get() == {"status": "skipped", "reason": "message_not_found"}

    def test_logs_carry_request_id(self, message_store, log_sink):
        message_store.create(make_event("Thanks!"))

        process_message_created.apply(args=["c1", "m1"], kwargs={"request_id": "req-123"})

        started = [e for e in log_sink if e["event"] == "process_message_created_started"]
        assert started[0]["request_id"] == "req-123"
        assert started[0]["task_name"] == "process_message_created"
        assert any(
            e["event"] == "pipeline.started" and e["request_id"] == "req-123" for e in log_sink
        )

    def test_task_context_cleared(self, message_store):
        message_store.create(make_event("Thanks!"))

        process_message_created.apply(args=["c1", "m1"], kwargs={"request_id": "req-123"})

        assert request_id_var.get() is None
        assert task_name_var.get() is None

    def test_task_does_not_retry(self):
        assert process_message_created.max_retries == 0
