"""Bearer tokens for the Google REST APIs (Cloud Translation, FCM HTTP v1).

Credentials come from Application Default Credentials: a service account
key named by GOOGLE_APPLICATION_CREDENTIALS, the metadata server on GCP, or
local gcloud user credentials. Access tokens expire after about an hour;
get_token() refreshes them before handing one out.

google-auth refreshes with a blocking HTTP call, so the refresh runs in the
threadpool. A lock keeps concurrent callers from refreshing twice.
"""

import threading
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Protocol

import google.auth
import google.auth.credentials
import google.auth.transport.requests
from starlette.concurrency import run_in_threadpool

from courier.logging import get_logger

logger = get_logger(__name__)

GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/firebase.messaging",
)


class TokenProvider(Protocol):
    """Source of a currently valid OAuth bearer token."""

    async def get_token(self) -> str: ...


class GoogleTokenProvider:
    """Hands out access tokens from google-auth credentials, refreshing as needed."""

    def __init__(
        self,
        credentials: google.auth.credentials.Credentials,
        request_factory: Callable[[], object] = google.auth.transport.requests.Request,
    ):
        """
        Args:
            credentials: google-auth credentials (scoped).
            request_factory: Builds the transport used for refresh calls.
        """
        self._credentials = credentials
        self._request_factory = request_factory
        self._lock = threading.Lock()

    @classmethod
    def from_default_credentials(
        cls, scopes: Sequence[str] = GOOGLE_SCOPES
    ) -> "GoogleTokenProvider":
        """Resolve Application Default Credentials.

        Raises:
            google.auth.exceptions.DefaultCredentialsError: If none are available.
        """
        credentials, _project = google.auth.default(scopes=list(scopes))
        return cls(credentials)

    async def get_token(self) -> str:
        """Return a valid access token, refreshing first if it is missing or expired.

        Raises:
            google.auth.exceptions.RefreshError: If the refresh fails.
        """
        if not self._credentials.valid:
            await run_in_threadpool(self._refresh)
        return self._credentials.token

    def _refresh(self) -> None:
        with self._lock:
            # Another caller may have refreshed while we waited
            if self._credentials.valid:
                return
            self._credentials.refresh(self._request_factory())
            logger.info("google_auth.token_refreshed", expiry=str(self._credentials.expiry))


@lru_cache
def get_default_token_provider() -> GoogleTokenProvider:
    """Process-wide token provider, shared by every pipeline run in the process."""
    return GoogleTokenProvider.from_default_credentials()
