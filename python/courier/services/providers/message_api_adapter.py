"""Message-API style adapter (Anthropic messages endpoint).

- Endpoint: taken verbatim from the provider record
  (e.g. https://api.anthropic.com/v1/messages)
- Headers: x-api-key: <credential>, anthropic-version: 2023-06-01,
  Content-Type: application/json

Request body:
{
  "model": "<model_name>",
  "max_tokens": 150,
  "messages": [{"role": "user", "content": "<prompt>"}]
}

Response - extract:
{
  "content": [{"type": "text", "text": "<reply>"}]
}

- text = content[0].text (first content block only)
"""

from courier.services.providers.adapter import ProviderAdapter
from courier.services.providers.types import DEFAULT_MAX_TOKENS, ProviderType

ANTHROPIC_API_VERSION = "2023-06-01"


class MessageApiAdapter(ProviderAdapter):
    """Adapter for Anthropic-style messages endpoints."""

    provider_type = ProviderType.MESSAGE_API

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
            "x-api-key": credential,
            "anthropic-version": ANTHROPIC_API_VERSION,
            "Content-Type": "application/json",
        }

    def _build_request_body(self, model: str | None, prompt: str) -> dict:
        """Build request body."""
        return {
            "model": model,
            "max_tokens": DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _parse_response(self, data) -> str:
        """Extract content[0].text."""
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
            raise self._missing("content")

        text = blocks[0].get("text")
        if not isinstance(text, str) or not text:
            raise self._missing("content[0].text")

        return text
