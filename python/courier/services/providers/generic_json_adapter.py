"""Generic JSON adapter for self-hosted or custom endpoints.

- Endpoint: taken verbatim from the provider record
- Headers: Authorization: Bearer <credential>, Content-Type: application/json
- No model field is sent

Request body:  {"prompt": "<prompt>"}
Response:      first non-empty string of "reply", "text", "result"
"""

from courier.services.providers.adapter import ProviderAdapter
from courier.services.providers.types import ProviderType

REPLY_FIELDS = ("reply", "text", "result")


class GenericJsonAdapter(ProviderAdapter):
    """Adapter for endpoints speaking a minimal {prompt} -> {reply} contract."""

    provider_type = ProviderType.GENERIC_JSON

    async def _send(
        self,
        endpoint: str,
        credential: str,
        model: str | None,
        prompt: str,
    ) -> str:
        data = await self._post_json(
            endpoint,
            headers={
                "Authorization": f"Bearer {credential}",
                "Content-Type": "application/json",
            },
            body={"prompt": prompt},
        )
        return self._parse_response(data)

    def _parse_response(self, data) -> str:
        if isinstance(data, dict):
            for key in REPLY_FIELDS:
                value = data.get(key)
                if isinstance(value, str) and value:
                    return value
        raise self._missing(" or ".join(REPLY_FIELDS))
