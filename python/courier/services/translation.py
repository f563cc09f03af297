"""Translation stage: language detection and conditional translation.

enrich(text, target_language) -> EnrichmentResult(original_language, translated_text)

- No client configured: (None, None) immediately (translation disabled)
- Detection yields nothing: (None, None)
- Target given and different from the detected language: both fields
- Same language, or no target: (detected, None); no redundant translation
- Any failure in either step: (None, None), logged, never raised

GoogleTranslationClient speaks the Cloud Translation v3 REST API:
- POST {base}/projects/{project}/locations/global:detectLanguage
    {"content": text, "mimeType": "text/plain"}
    -> {"languages": [{"languageCode": "es", "confidence": 1.0}]}
- POST {base}/projects/{project}/locations/global:translateText
    {"contents": [text], "mimeType": "text/plain", "targetLanguageCode": "en"}
    -> {"translations": [{"translatedText": "..."}]}
"""

import time
from dataclasses import dataclass
from typing import Protocol

import httpx

from courier.logging import get_logger
from courier.services.google_credentials import TokenProvider
from courier.services.redact import safe_kv

logger = get_logger(__name__)

TRANSLATE_BASE_URL = "https://translation.googleapis.com/v3"


@dataclass(frozen=True)
class EnrichmentResult:
    """Outcome of the translation stage. Both fields absent means "nothing to record"."""

    original_language: str | None = None
    translated_text: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.original_language is None and self.translated_text is None


EMPTY_ENRICHMENT = EnrichmentResult()


class TranslationClient(Protocol):
    """Backend able to detect and translate text."""

    async def detect_language(self, text: str) -> str | None: ...

    async def translate(self, text: str, target_language: str) -> str | None: ...


class GoogleTranslationClient:
    """Cloud Translation v3 over the shared httpx client.

    Errors (token refresh, HTTP status, transport, malformed JSON) propagate to the caller;
    the stage decides how to degrade.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        project_id: str,
        token_provider: TokenProvider,
        timeout_s: float,
        base_url: str = TRANSLATE_BASE_URL,
    ):
        self._client = client
        self._token_provider = token_provider
        self._timeout = httpx.Timeout(timeout_s, connect=min(5.0, timeout_s))
        self._parent_url = f"{base_url}/projects/{project_id}/locations/global"

    async def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {await self._token_provider.get_token()}",
            "Content-Type": "application/json",
        }

    async def _post(self, method: str, body: dict) -> dict:
        response = await self._client.post(
            f"{self._parent_url}:{method}",
            headers=await self._headers(),
            json=body,
            timeout=self._timeout,
        )
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def detect_language(self, text: str) -> str | None:
        data = await self._post("detectLanguage", {"content": text, "mimeType": "text/plain"})
        languages = data.get("languages") or []
        if not languages or not isinstance(languages[0], dict):
            return None
        return languages[0].get("languageCode") or None

    async def translate(self, text: str, target_language: str) -> str | None:
        data = await self._post(
            "translateText",
            {
                "contents": [text],
                "mimeType": "text/plain",
                "targetLanguageCode": target_language,
            },
        )
        translations = data.get("translations") or []
        if not translations or not isinstance(translations[0], dict):
            return None
        return translations[0].get("translatedText") or None


class TranslationStage:
    """Detects the source language and translates when it differs from the target."""

    def __init__(self, client: TranslationClient | None):
        """
        Args:
            client: Translation backend, or None when translation is not configured.
        """
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def enrich(self, text: str, target_language: str | None) -> EnrichmentResult:
        """Detect and, if needed, translate text into target_language.

        Args:
            text: Message text (may be empty).
            target_language: Receiver's preferred language code.

        Returns:
            EnrichmentResult; EMPTY_ENRICHMENT when disabled or on any failure.
        """
        if self._client is None:
            return EMPTY_ENRICHMENT

        start = time.monotonic()
        try:
            detected = await self._client.detect_language(text)
            if not detected:
                logger.info("translation.detect.empty", **safe_kv(text_chars=len(text)))
                return EMPTY_ENRICHMENT

            if target_language and target_language != detected:
                translated = await self._client.translate(text, target_language)
                logger.info(
                    "translation.translated",
                    source_language=detected,
                    target_language=target_language,
                    latency_ms=int((time.monotonic() - start) * 1000),
                )
                return EnrichmentResult(original_language=detected, translated_text=translated)

            return EnrichmentResult(original_language=detected, translated_text=None)

        except Exception as e:
            logger.warning(
                "translation.failed",
                error_type=type(e).__name__,
                target_language=target_language,
                latency_ms=int((time.monotonic() - start) * 1000),
            )
            return EMPTY_ENRICHMENT
