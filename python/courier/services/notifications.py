"""Push notification dispatch.

notify(user_id, payload) never fails visibly:
- No user record or no device token: silent no-op (notifications are optional per user)
- No push client configured: logged no-op
- Lookup or delivery errors: caught and logged

FcmPushClient speaks the FCM HTTP v1 API:
    POST https://fcm.googleapis.com/v1/projects/{project}/messages:send
    {"message": {"token": ..., "notification": {"title": ..., "body": ...}, "data": {...}}}

FCM requires every data value to be a string; payload data is coerced.
The user lookup is a sync store call and runs in the threadpool.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from starlette.concurrency import run_in_threadpool

from courier.logging import get_logger
from courier.services.google_credentials import TokenProvider
from courier.services.stores import UserStore

logger = get_logger(__name__)

FCM_BASE_URL = "https://fcm.googleapis.com/v1"
DEFAULT_TITLE = "New message"


@dataclass(frozen=True)
class NotificationPayload:
    """What to show the user and where the client should deep-link.

    Attributes:
        title: Notification title
        body: Notification body text
        data: Opaque client payload (e.g. chatId / messageId)
    """

    title: str = DEFAULT_TITLE
    body: str = ""
    data: dict[str, Any] = field(default_factory=dict)


class PushClient(Protocol):
    """Delivers one push message to one device."""

    async def send(self, token: str, title: str, body: str, data: dict[str, str]) -> None: ...


class FcmPushClient:
    """Firebase Cloud Messaging HTTP v1 client over the shared httpx client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        project_id: str,
        token_provider: TokenProvider,
        timeout_s: float,
        base_url: str = FCM_BASE_URL,
    ):
        self._client = client
        self._token_provider = token_provider
        self._timeout = httpx.Timeout(timeout_s, connect=min(5.0, timeout_s))
        self._url = f"{base_url}/projects/{project_id}/messages:send"

    async def send(self, token: str, title: str, body: str, data: dict[str, str]) -> None:
        access_token = await self._token_provider.get_token()
        response = await self._client.post(
            self._url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            json={
                "message": {
                    "token": token,
                    "notification": {"title": title, "body": body},
                    "data": data,
                }
            },
            timeout=self._timeout,
        )
        response.raise_for_status()


class NotificationDispatcher:
    """Looks up a user's device token and sends a push message to it."""

    def __init__(self, users: UserStore, push_client: PushClient | None):
        self._users = users
        self._push_client = push_client

    async def notify(self, user_id: str | None, payload: NotificationPayload) -> None:
        """Send payload to user_id's device, if any. Never raises."""
        if not user_id:
            return

        try:
            user = await run_in_threadpool(self._users.get, user_id)
            if user is None or not user.device_token:
                logger.debug("notification.skipped_no_token", user_id=user_id)
                return

            if self._push_client is None:
                logger.info("notification.skipped_not_configured", user_id=user_id)
                return

            data = {str(key): str(value) for key, value in payload.data.items()}
            await self._push_client.send(
                user.device_token,
                payload.title or DEFAULT_TITLE,
                payload.body or "",
                data,
            )
            logger.info("notification.sent", user_id=user_id, title=payload.title)

        except Exception as e:
            logger.warning(
                "notification.failed",
                user_id=user_id,
                error_type=type(e).__name__,
            )
