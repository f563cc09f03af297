"""Redaction, hashing, and log guard utilities.

- hash_text: stable SHA-256 hex digest for log correlation
- safe_kv: log guard that blocks forbidden keys at call site

Never-log policy:
- Provider credentials (API keys, bearer tokens)
- Device tokens
- Rendered prompts
- Message text, translated text and assistant replies

Allowed (with suffix):
- _chars, _length: length of text
- _sha256, _hash: hash of text
"""

import hashlib
import os

FORBIDDEN_KEYS = frozenset(
    {
        "prompt",
        "content",
        "text",
        "reply",
        "credential",
        "api_key",
        "bearer",
        "token",
        "device_token",
        "secret",
        "password",
        "message_text",
        "translated_text",
        "raw_body",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars")


def hash_text(value: str) -> str:
    """SHA-256 hex digest of a string.

    Args:
        value: Text to hash.

    Returns:
        Hex-encoded SHA-256 digest.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _has_redacted_suffix(key: str) -> bool:
    """Check if key ends with a recognized redacted suffix."""
    return any(key.endswith(suffix) for suffix in REDACTED_SUFFIXES)


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Raises ValueError in local/test environments if a forbidden key is used
    without a redacted suffix. In staging/prod, logs a warning instead.

    Usage:
        logger.info("provider.call.started", **safe_kv(
            provider_type="chat-completion",
            prompt_chars=123,      # OK: _chars suffix
            # credential="sk-..",  # BLOCKED: forbidden key
        ))

    Args:
        _env: Override for COURIER_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.

    Raises:
        ValueError: In local/test, if a forbidden key is used without redacted suffix.
    """
    violations = [key for key in kwargs if key in FORBIDDEN_KEYS and not _has_redacted_suffix(key)]

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("COURIER_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        else:
            import structlog

            _logger = structlog.get_logger("courier.services.redact")
            _logger.warning("safe_kv_violation", forbidden_keys=violations)
            for key in violations:
                kwargs.pop(key)

    return kwargs
