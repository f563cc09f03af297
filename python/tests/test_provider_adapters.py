"""Tests for the provider adapter layer.

Test coverage per variant:
- success: documented field is extracted, wire format (auth, body) is right
- non-2xx: None, classified in the failure log
- malformed body / missing field: None, no exception
- timeout and network errors: None, no exception

Plus the router (type -> adapter, aliases, incomplete configs) and
error classification.

Explicitly Forbidden:
- Live provider calls
- Real API keys anywhere in test code

These are pure unit tests: no database, respx mocks every request.
"""

import json

import httpx
import pytest
import respx

from courier.services.providers import (
    ProviderErrorClass,
    ProviderRouter,
    ProviderType,
    UnknownProviderTypeError,
    classify_provider_error,
    resolve_provider_type,
)
from courier.services.providers.chat_completion_adapter import ChatCompletionAdapter
from courier.services.providers.errors import ProviderError
from courier.services.providers.generative_content_adapter import GenerativeContentAdapter
from courier.services.providers.generic_json_adapter import GenericJsonAdapter
from courier.services.providers.message_api_adapter import MessageApiAdapter
from tests.fakes import make_provider

CHAT_URL = "https://api.example.com/v1/chat/completions"
MESSAGES_URL = "https://api.example.com/v1/messages"
GENERATE_TEMPLATE = "https://gen.example.com/v1beta/models/{model}:generateContent"
GENERATE_URL = "https://gen.example.com/v1beta/models/gemini-pro:generateContent"
CUSTOM_URL = "https://bot.example.com/reply"

PROMPT = "User message: Is it available?\nPlease provide a professional assistant reply."


def failure_events(log_sink) -> list[dict]:
    return [e for e in log_sink if e["event"] == "provider.call.failed"]


# =============================================================================
# Chat-completion
# =============================================================================


class TestChatCompletionAdapter:
    """Tests for the chat-completion variant."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_extracts_message_content(self, httpx_client):
        route = respx.post(CHAT_URL).respond(
            200, json={"choices": [{"message": {"content": "Yes, still available."}}]}
        )

        adapter = ChatCompletionAdapter(httpx_client, default_model="gpt-3.5-turbo")
        reply = await adapter.call(CHAT_URL, "test-credential", None, PROMPT)

        assert reply == "Yes, still available."
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer test-credential"
        body = json.loads(request.content)
        assert body["model"] == "gpt-3.5-turbo"
        assert body["messages"] == [{"role": "user", "content": PROMPT}]
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 150

    @pytest.mark.asyncio
    @respx.mock
    async def test_model_override_is_sent(self, httpx_client):
        route = respx.post(CHAT_URL).respond(
            200, json={"choices": [{"message": {"content": "ok"}}]}
        )

        adapter = ChatCompletionAdapter(httpx_client, default_model="gpt-3.5-turbo")
        await adapter.call(CHAT_URL, "test-credential", "gpt-4", PROMPT)

        assert json.loads(route.calls.last.request.content)["model"] == "gpt-4"

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_returns_none(self, httpx_client, log_sink):
        respx.post(CHAT_URL).respond(500, json={"error": "boom"})

        adapter = ChatCompletionAdapter(httpx_client)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None

        [event] = failure_events(log_sink)
        assert event["error_class"] == ProviderErrorClass.PROVIDER_DOWN.value
        assert event["status_code"] == 500

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_key_401_returns_none(self, httpx_client, log_sink):
        respx.post(CHAT_URL).respond(401, json={"error": {"message": "bad key"}})

        adapter = ChatCompletionAdapter(httpx_client)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None
        assert failure_events(log_sink)[0]["error_class"] == "E_PROVIDER_INVALID_KEY"

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_choices_returns_none(self, httpx_client, log_sink):
        respx.post(CHAT_URL).respond(200, json={"choices": []})

        adapter = ChatCompletionAdapter(httpx_client)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None
        assert failure_events(log_sink)[0]["error_class"] == "E_PROVIDER_BAD_RESPONSE"

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_returns_none(self, httpx_client):
        respx.post(CHAT_URL).respond(200, content=b"<html>not json</html>")

        adapter = ChatCompletionAdapter(httpx_client)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_returns_none(self, httpx_client, log_sink):
        respx.post(CHAT_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        adapter = ChatCompletionAdapter(httpx_client, timeout_s=1)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None
        assert failure_events(log_sink)[0]["error_class"] == "E_PROVIDER_TIMEOUT"

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_returns_none(self, httpx_client):
        respx.post(CHAT_URL).mock(side_effect=httpx.ConnectError("refused"))

        adapter = ChatCompletionAdapter(httpx_client)
        assert await adapter.call(CHAT_URL, "test-credential", None, PROMPT) is None


# =============================================================================
# Message-api
# =============================================================================


class TestMessageApiAdapter:
    """Tests for the message-api variant."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_extracts_first_content_block(self, httpx_client):
        route = respx.post(MESSAGES_URL).respond(
            200,
            json={"content": [{"type": "text", "text": "Happy to help."}, {"text": "ignored"}]},
        )

        adapter = MessageApiAdapter(httpx_client, default_model="claude-3-sonnet-20240229")
        reply = await adapter.call(MESSAGES_URL, "test-credential", None, PROMPT)

        assert reply == "Happy to help."
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "test-credential"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in request.headers
        body = json.loads(request.content)
        assert body == {
            "model": "claude-3-sonnet-20240229",
            "max_tokens": 150,
            "messages": [{"role": "user", "content": PROMPT}],
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_429_returns_none(self, httpx_client, log_sink):
        respx.post(MESSAGES_URL).respond(429, json={"error": {"type": "rate_limit_error"}})

        adapter = MessageApiAdapter(httpx_client)
        assert await adapter.call(MESSAGES_URL, "test-credential", None, PROMPT) is None
        assert failure_events(log_sink)[0]["error_class"] == "E_PROVIDER_RATE_LIMIT"

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_text_returns_none(self, httpx_client):
        respx.post(MESSAGES_URL).respond(200, json={"content": [{"type": "tool_use"}]})

        adapter = MessageApiAdapter(httpx_client)
        assert await adapter.call(MESSAGES_URL, "test-credential", None, PROMPT) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_returns_none(self, httpx_client):
        respx.post(MESSAGES_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

        adapter = MessageApiAdapter(httpx_client)
        assert await adapter.call(MESSAGES_URL, "test-credential", None, PROMPT) is None


# =============================================================================
# Generative-content
# =============================================================================


class TestGenerativeContentAdapter:
    """Tests for the generative-content variant."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_substitutes_model_and_passes_key(self, httpx_client):
        route = respx.post(GENERATE_URL, params={"key": "test-credential"}).respond(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "Sure thing."}]}}]},
        )

        adapter = GenerativeContentAdapter(httpx_client, default_model="gemini-pro")
        reply = await adapter.call(GENERATE_TEMPLATE, "test-credential", None, PROMPT)

        assert reply == "Sure thing."
        request = route.calls.last.request
        assert request.url.params["key"] == "test-credential"
        assert "Authorization" not in request.headers
        body = json.loads(request.content)
        assert body == {
            "contents": [{"parts": [{"text": PROMPT}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 150},
        }

    def test_build_url_without_placeholder_is_unchanged(self):
        assert GenerativeContentAdapter.build_url(CUSTOM_URL, "gemini-pro") == CUSTOM_URL

    def test_build_url_substitutes_model(self):
        assert GenerativeContentAdapter.build_url(GENERATE_TEMPLATE, "gemini-pro") == GENERATE_URL

    @pytest.mark.asyncio
    @respx.mock
    async def test_model_not_found_404_returns_none(self, httpx_client, log_sink):
        respx.post(GENERATE_URL).respond(404, json={"error": {"status": "NOT_FOUND"}})

        adapter = GenerativeContentAdapter(httpx_client, default_model="gemini-pro")
        assert await adapter.call(GENERATE_TEMPLATE, "test-credential", None, PROMPT) is None
        assert failure_events(log_sink)[0]["error_class"] == "E_MODEL_NOT_AVAILABLE"

    @pytest.mark.asyncio
    @respx.mock
    async def test_blocked_candidate_returns_none(self, httpx_client):
        respx.post(GENERATE_URL).respond(
            200, json={"candidates": [{"finishReason": "SAFETY", "content": {"parts": []}}]}
        )

        adapter = GenerativeContentAdapter(httpx_client, default_model="gemini-pro")
        assert await adapter.call(GENERATE_TEMPLATE, "test-credential", None, PROMPT) is None


# =============================================================================
# Generic-json
# =============================================================================


class TestGenericJsonAdapter:
    """Tests for the generic-json variant."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_reads_reply_field(self, httpx_client):
        route = respx.post(CUSTOM_URL).respond(200, json={"reply": "Hi there"})

        adapter = GenericJsonAdapter(httpx_client)
        reply = await adapter.call(CUSTOM_URL, "test-credential", None, PROMPT)

        assert reply == "Hi there"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer test-credential"
        assert json.loads(request.content) == {"prompt": PROMPT}

    @pytest.mark.asyncio
    @respx.mock
    async def test_falls_back_to_text_then_result(self, httpx_client):
        respx.post(CUSTOM_URL).respond(200, json={"reply": "", "text": None, "result": "R"})

        adapter = GenericJsonAdapter(httpx_client)
        assert await adapter.call(CUSTOM_URL, "test-credential", None, PROMPT) == "R"

    @pytest.mark.asyncio
    @respx.mock
    async def test_reply_wins_over_text(self, httpx_client):
        respx.post(CUSTOM_URL).respond(200, json={"text": "T", "reply": "R"})

        adapter = GenericJsonAdapter(httpx_client)
        assert await adapter.call(CUSTOM_URL, "test-credential", None, PROMPT) == "R"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_known_field_returns_none(self, httpx_client):
        respx.post(CUSTOM_URL).respond(200, json={"answer": "wrong key"})

        adapter = GenericJsonAdapter(httpx_client)
        assert await adapter.call(CUSTOM_URL, "test-credential", None, PROMPT) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_object_body_returns_none(self, httpx_client):
        respx.post(CUSTOM_URL).respond(200, json=["reply"])

        adapter = GenericJsonAdapter(httpx_client)
        assert await adapter.call(CUSTOM_URL, "test-credential", None, PROMPT) is None


# =============================================================================
# Logging hygiene
# =============================================================================


class TestAdapterLogging:
    """Adapters never log credentials, prompts or replies."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_logs_lengths_only(self, httpx_client, log_sink):
        respx.post(CUSTOM_URL).respond(200, json={"reply": "secret reply"})

        adapter = GenericJsonAdapter(httpx_client)
        await adapter.call(CUSTOM_URL, "sk-very-secret", None, PROMPT)

        events = [e for e in log_sink if e["event"].startswith("provider.call.")]
        assert [e["event"] for e in events] == ["provider.call.started", "provider.call.finished"]
        assert events[0]["prompt_chars"] == len(PROMPT)
        assert events[1]["reply_chars"] == len("secret reply")
        for event in events:
            rendered = repr(event)
            assert "sk-very-secret" not in rendered
            assert PROMPT not in rendered
            assert "secret reply" not in rendered


# =============================================================================
# Router
# =============================================================================


class TestProviderRouter:
    """Tests for type -> adapter selection."""

    @pytest.mark.parametrize(
        "type_name,variant",
        [
            ("chat-completion", ProviderType.CHAT_COMPLETION),
            ("openai", ProviderType.CHAT_COMPLETION),
            ("deepseek", ProviderType.CHAT_COMPLETION),
            ("message-api", ProviderType.MESSAGE_API),
            ("claude", ProviderType.MESSAGE_API),
            ("anthropic", ProviderType.MESSAGE_API),
            ("generative-content", ProviderType.GENERATIVE_CONTENT),
            ("gemini", ProviderType.GENERATIVE_CONTENT),
            ("generic-json", ProviderType.GENERIC_JSON),
            ("custom", ProviderType.GENERIC_JSON),
            ("  OpenAI ", ProviderType.CHAT_COMPLETION),
        ],
    )
    def test_resolves_variants_and_aliases(self, httpx_client, type_name, variant):
        router = ProviderRouter(httpx_client)
        assert router.resolve_adapter(type_name).provider_type == variant
        assert router.is_supported(type_name)

    def test_alias_default_models(self, httpx_client):
        router = ProviderRouter(httpx_client)
        assert router.resolve_adapter("openai").default_model == "gpt-3.5-turbo"
        assert router.resolve_adapter("deepseek").default_model == "deepseek-chat"
        assert router.resolve_adapter("gemini").default_model == "gemini-pro"
        assert router.resolve_adapter("custom").default_model is None

    def test_unknown_type_raises(self, httpx_client):
        router = ProviderRouter(httpx_client)
        with pytest.raises(UnknownProviderTypeError):
            router.resolve_adapter("carrier-pigeon")
        assert not router.is_supported("carrier-pigeon")

    def test_unknown_type_rejected_at_config_construction(self):
        with pytest.raises(UnknownProviderTypeError):
            make_provider(type="carrier-pigeon")
        with pytest.raises(UnknownProviderTypeError):
            resolve_provider_type(None)

    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_reply_uses_provider_model(self, httpx_client):
        route = respx.post(CHAT_URL).respond(
            200, json={"choices": [{"message": {"content": "ok"}}]}
        )

        router = ProviderRouter(httpx_client, timeout_s=2)
        provider = make_provider(type="deepseek", endpoint=CHAT_URL)
        assert await router.generate_reply(provider, PROMPT) == "ok"
        assert json.loads(route.calls.last.request.content)["model"] == "deepseek-chat"

    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_reply_incomplete_config_makes_no_request(self, httpx_client):
        route = respx.post(CHAT_URL).respond(200, json={})

        router = ProviderRouter(httpx_client)
        provider = make_provider(endpoint=CHAT_URL, credential="")
        assert await router.generate_reply(provider, PROMPT) is None
        assert not route.called

    def test_credential_not_in_repr(self):
        provider = make_provider(credential="sk-should-not-leak")
        assert "sk-should-not-leak" not in repr(provider)


# =============================================================================
# Error classification
# =============================================================================


class TestErrorClassification:
    """Tests for classify_provider_error."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (401, ProviderErrorClass.INVALID_KEY),
            (403, ProviderErrorClass.INVALID_KEY),
            (429, ProviderErrorClass.RATE_LIMIT),
            (404, ProviderErrorClass.MODEL_NOT_AVAILABLE),
            (408, ProviderErrorClass.TIMEOUT),
            (504, ProviderErrorClass.TIMEOUT),
            (500, ProviderErrorClass.PROVIDER_DOWN),
            (503, ProviderErrorClass.PROVIDER_DOWN),
        ],
    )
    def test_status_codes(self, status, expected):
        assert classify_provider_error(status) == expected

    def test_timeout_exception(self):
        assert (
            classify_provider_error(None, httpx.ReadTimeout("slow"))
            == ProviderErrorClass.TIMEOUT
        )

    def test_network_exception(self):
        assert (
            classify_provider_error(None, httpx.ConnectError("refused"))
            == ProviderErrorClass.PROVIDER_DOWN
        )

    def test_json_decode_error(self):
        error = json.JSONDecodeError("Expecting value", "not json", 0)
        assert classify_provider_error(None, error) == ProviderErrorClass.BAD_RESPONSE

    def test_provider_error_keeps_its_class(self):
        error = ProviderError(ProviderErrorClass.BAD_RESPONSE, "missing field")
        assert classify_provider_error(None, error) == ProviderErrorClass.BAD_RESPONSE
