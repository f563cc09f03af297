"""Tests for logging context and the never-log guard.

Covers:
- hash_text helper
- safe_kv blocks forbidden keys in local/test and strips them elsewhere
- Context vars (request, task, message) are injected into every event
"""

import pytest
import structlog

from courier.logging import (
    add_request_context,
    bind_message_context,
    clear_message_context,
    clear_task_context,
    configure_task_logging,
    set_request_id,
)
from courier.services.redact import FORBIDDEN_KEYS, hash_text, safe_kv


class TestHashText:
    def test_stable_output(self):
        assert hash_text("hello") == hash_text("hello")

    def test_different_inputs_differ(self):
        assert hash_text("hello") != hash_text("world")

    def test_returns_hex_string(self):
        digest = hash_text("hello")
        assert len(digest) == 64
        int(digest, 16)


class TestSafeKv:
    def test_allows_safe_keys(self):
        assert safe_kv(provider_type="chat-completion", status_code=200) == {
            "provider_type": "chat-completion",
            "status_code": 200,
        }

    def test_allows_redacted_suffix_keys(self):
        assert safe_kv(prompt_chars=12, text_sha256="abc") == {
            "prompt_chars": 12,
            "text_sha256": "abc",
        }

    @pytest.mark.parametrize("key", sorted(FORBIDDEN_KEYS))
    def test_blocks_forbidden_keys_in_test(self, key):
        with pytest.raises(ValueError, match=key):
            safe_kv(_env="test", **{key: "value"})

    def test_strips_forbidden_keys_in_prod(self, log_sink):
        result = safe_kv(_env="prod", credential="sk-secret", provider_id="p1")

        assert result == {"provider_id": "p1"}
        assert any(e["event"] == "safe_kv_violation" for e in log_sink)
        assert "sk-secret" not in repr(log_sink)


class TestContextVars:
    @pytest.fixture(autouse=True)
    def reset_context(self):
        yield
        set_request_id(None)
        clear_task_context()
        clear_message_context()

    def test_request_and_message_context_injected(self):
        set_request_id("req-1")
        bind_message_context("c1", "m1")

        event = add_request_context(None, "info", {"event": "x"})

        assert event["request_id"] == "req-1"
        assert event["chat_id"] == "c1"
        assert event["message_id"] == "m1"

    def test_task_context_injected(self):
        configure_task_logging(request_id="req-2", task_name="t", task_id="id-1")

        event = add_request_context(None, "info", {"event": "x"})

        assert (event["request_id"], event["task_name"], event["task_id"]) == (
            "req-2",
            "t",
            "id-1",
        )

    def test_explicit_fields_win(self):
        bind_message_context("c1", "m1")
        event = add_request_context(None, "info", {"event": "x", "chat_id": "other"})
        assert event["chat_id"] == "other"

    def test_none_values_not_injected(self):
        event = add_request_context(None, "info", {"event": "x"})
        assert set(event) == {"event"}

    def test_clear_message_context(self):
        bind_message_context("c1", "m1")
        clear_message_context()
        event = add_request_context(None, "info", {"event": "x"})
        assert "chat_id" not in event

    def test_log_sink_sees_bound_context(self, log_sink):
        bind_message_context("c9", "m9")
        structlog.get_logger("test").info("pipeline.started")

        assert log_sink[-1]["chat_id"] == "c9"
        assert log_sink[-1]["level"] == "info"
