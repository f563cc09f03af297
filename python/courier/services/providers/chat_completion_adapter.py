"""Chat-completion style adapter (OpenAI, DeepSeek and compatible APIs).

- Endpoint: taken verbatim from the provider record
  (e.g. https://api.openai.com/v1/chat/completions)
- Headers: Authorization: Bearer <credential>, Content-Type: application/json

Request body:
{
  "model": "<model_name>",
  "messages": [{"role": "user", "content": "<prompt>"}],
  "temperature": 0.7,
  "max_tokens": 150
}

Response - extract:
{
  "choices": [{"message": {"content": "<reply>"}}]
}
"""

from courier.services.providers.adapter import ProviderAdapter
from courier.services.providers.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderType,
)


class ChatCompletionAdapter(ProviderAdapter):
    """Adapter for OpenAI-compatible chat completion endpoints."""

    provider_type = ProviderType.CHAT_COMPLETION

    async def _send(
        self,
        endpoint: str,
        credential: str,
        model: str | None,
        prompt: str,
    ) -> str:
        data = await self._post_json(
            endpoint,
            headers=self._build_headers(credential),
            body=self._build_request_body(model, prompt),
        )
        return self._parse_response(data)

    def _build_headers(self, credential: str) -> dict[str, str]:
        """Build request headers."""
        return {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }

    def _build_request_body(self, model: str | None, prompt: str) -> dict:
        """Build request body."""
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": DEFAULT_TEMPERATURE,
            "max_tokens": DEFAULT_MAX_TOKENS,
        }

    def _parse_response(self, data) -> str:
        """Extract choices[0].message.content."""
        if not isinstance(data, dict):
            raise self._missing("choices")

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise self._missing("choices")

        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content:
            raise self._missing("choices[0].message.content")

        return content
