"""Application settings loaded from environment variables.

Environment Configuration:
    COURIER_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (required)

Redis / Celery Configuration:
    REDIS_URL: Redis connection string (required for worker)
    CELERY_BROKER_URL: Celery broker URL (defaults to REDIS_URL)
    CELERY_RESULT_BACKEND: Celery result backend URL (defaults to REDIS_URL)

Translation Configuration (optional):
    GCLOUD_PROJECT_ID: Google Cloud project used for Cloud Translation.
        Translation is disabled entirely when unset.

Push Notification Configuration (optional):
    FCM_PROJECT_ID: Firebase project for FCM HTTP v1 delivery.
        Notifications are a logged no-op when unset.

Google Credentials:
    Translation and FCM authenticate with Application Default Credentials
    (GOOGLE_APPLICATION_CREDENTIALS, the GCP metadata server, or gcloud).
    Tokens are refreshed before they expire.

Pipeline Configuration:
    OUTBOUND_TIMEOUT_S: Timeout for every outbound network call (1..30 seconds)
    ASSISTANT_FALLBACK_REPLY: Reply used when no provider produced text
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_FALLBACK_REPLY = (
    "Hello! The assistant noticed your question and recommends checking the details "
    "with the seller. If you want, ask for order details or schedule a call."
)


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - OUTBOUND_TIMEOUT_S must be between 1 and 30 seconds
    """

    courier_env: Environment = Field(default=Environment.LOCAL, alias="COURIER_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Redis / Celery settings
    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    celery_broker_url: str | None = Field(default=None, alias="CELERY_BROKER_URL")
    celery_result_backend: str | None = Field(default=None, alias="CELERY_RESULT_BACKEND")

    # Google Cloud Translation (feature-flagged by project id)
    gcloud_project_id: str | None = Field(default=None, alias="GCLOUD_PROJECT_ID")

    # Firebase Cloud Messaging
    fcm_project_id: str | None = Field(default=None, alias="FCM_PROJECT_ID")

    # Pipeline behaviour
    outbound_timeout_s: float = Field(default=8.0, alias="OUTBOUND_TIMEOUT_S")
    assistant_fallback_reply: str = Field(
        default=DEFAULT_FALLBACK_REPLY, alias="ASSISTANT_FALLBACK_REPLY"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure dependent settings are consistent."""
        if not 1 <= self.outbound_timeout_s <= 30:
            raise ValueError(
                f"OUTBOUND_TIMEOUT_S must be between 1 and 30 seconds, "
                f"got {self.outbound_timeout_s}"
            )

        if not self.assistant_fallback_reply.strip():
            raise ValueError("ASSISTANT_FALLBACK_REPLY must not be blank")

        return self

    @property
    def translation_enabled(self) -> bool:
        """Whether the translation stage has a backend."""
        return bool(self.gcloud_project_id)

    @property
    def notifications_enabled(self) -> bool:
        """Whether push notifications can be delivered."""
        return bool(self.fcm_project_id)

    @property
    def effective_celery_broker_url(self) -> str | None:
        """Return Celery broker URL, falling back to REDIS_URL if not set."""
        return self.celery_broker_url or self.redis_url

    @property
    def effective_celery_result_backend(self) -> str | None:
        """Return Celery result backend URL, falling back to REDIS_URL if not set."""
        return self.celery_result_backend or self.redis_url


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
