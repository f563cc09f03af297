"""Generative-content style adapter (Google Gemini).

- Endpoint: provider record URL with "{model}" substituted, e.g.
  https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent
- Auth: credential passed as the "key" query parameter (no auth header)

Request body:
{
  "contents": [{"parts": [{"text": "<prompt>"}]}],
  "generationConfig": {"temperature": 0.7, "maxOutputTokens": 150}
}

Response - extract:
{
  "candidates": [{"content": {"parts": [{"text": "<reply>"}]}}]
}

- text = candidates[0].content.parts[0].text
"""

from courier.services.providers.adapter import ProviderAdapter
from courier.services.providers.types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderType,
)

MODEL_PLACEHOLDER = "{model}"


class GenerativeContentAdapter(ProviderAdapter):
    """Adapter for Gemini-style generateContent endpoints."""

    provider_type = ProviderType.GENERATIVE_CONTENT

    async def _send(
        self,
        endpoint: str,
        credential: str,
        model: str | None,
        prompt: str,
    ) -> str:
        data = await self._post_json(
            self.build_url(endpoint, model),
            headers={"Content-Type": "application/json"},
            body=self._build_request_body(prompt),
            params={"key": credential},
        )
        return self._parse_response(data)

    @staticmethod
    def build_url(endpoint: str, model: str | None) -> str:
        """Substitute the model into the endpoint template."""
        return endpoint.replace(MODEL_PLACEHOLDER, model or "")

    def _build_request_body(self, prompt: str) -> dict:
        """Build request body."""
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": DEFAULT_TEMPERATURE,
                "maxOutputTokens": DEFAULT_MAX_TOKENS,
            },
        }

    def _parse_response(self, data) -> str:
        """Extract candidates[0].content.parts[0].text."""
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise self._missing("candidates")

        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            raise self._missing("candidates[0].content.parts")

        text = parts[0].get("text")
        if not isinstance(text, str) or not text:
            raise self._missing("candidates[0].content.parts[0].text")

        return text
