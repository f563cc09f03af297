"""Tests for notification dispatch.

- Missing user, missing token or missing push client: no-op
- Lookup or delivery failure: logged, never raised
- Data values are sent as strings
"""

import json
from datetime import timedelta

import pytest
import respx

from courier.services.google_credentials import GoogleTokenProvider
from courier.services.notifications import (
    FcmPushClient,
    NotificationDispatcher,
    NotificationPayload,
)
from courier.services.types import UserRecord
from tests.fakes import (
    FakeGoogleCredentials,
    FakePushClient,
    FakeUserStore,
    make_token_provider,
)

FCM_URL = "https://fcm.googleapis.com/v1/projects/fcm-proj/messages:send"


def _users() -> FakeUserStore:
    return FakeUserStore(
        {
            "u2": UserRecord(id="u2", language="en", device_token="device-abc"),
            "u3": UserRecord(id="u3", language="fr", device_token=None),
        }
    )


class TestNotificationDispatcher:
    @pytest.mark.asyncio
    async def test_sends_to_device_token(self):
        push = FakePushClient()
        dispatcher = NotificationDispatcher(_users(), push)

        await dispatcher.notify(
            "u2",
            NotificationPayload(title="New message", body="Hola", data={"chatId": "c1"}),
        )

        assert len(push.sent) == 1
        sent = push.sent[0]
        assert (sent.token, sent.title, sent.body) == ("device-abc", "New message", "Hola")
        assert sent.data == {"chatId": "c1"}

    @pytest.mark.asyncio
    async def test_data_values_are_coerced_to_strings(self):
        push = FakePushClient()
        await NotificationDispatcher(_users(), push).notify(
            "u2", NotificationPayload(data={"count": 3, "flag": True})
        )
        assert push.sent[0].data == {"count": "3", "flag": "True"}

    @pytest.mark.asyncio
    async def test_default_title(self):
        push = FakePushClient()
        await NotificationDispatcher(_users(), push).notify("u2", NotificationPayload(body="x"))
        assert push.sent[0].title == "New message"

    @pytest.mark.asyncio
    async def test_no_token_is_noop(self):
        push = FakePushClient()
        await NotificationDispatcher(_users(), push).notify("u3", NotificationPayload())
        assert push.sent == []

    @pytest.mark.asyncio
    async def test_unknown_user_is_noop(self):
        push = FakePushClient()
        await NotificationDispatcher(_users(), push).notify("nobody", NotificationPayload())
        assert push.sent == []

    @pytest.mark.asyncio
    async def test_no_push_client_is_logged_noop(self, log_sink):
        await NotificationDispatcher(_users(), None).notify("u2", NotificationPayload())
        assert any(e["event"] == "notification.skipped_not_configured" for e in log_sink)

    @pytest.mark.asyncio
    async def test_delivery_failure_is_swallowed(self, log_sink):
        dispatcher = NotificationDispatcher(_users(), FakePushClient(fail=True))
        await dispatcher.notify("u2", NotificationPayload())
        assert any(e["event"] == "notification.failed" for e in log_sink)

    @pytest.mark.asyncio
    async def test_lookup_failure_is_swallowed(self):
        push = FakePushClient()
        dispatcher = NotificationDispatcher(FakeUserStore(fail=True), push)
        await dispatcher.notify("u2", NotificationPayload())
        assert push.sent == []

    @pytest.mark.asyncio
    async def test_device_token_never_logged(self, log_sink):
        await NotificationDispatcher(_users(), FakePushClient()).notify(
            "u2", NotificationPayload(body="private text")
        )
        for event in log_sink:
            assert "device-abc" not in repr(event)
            assert "private text" not in repr(event)


class TestFcmPushClient:
    @pytest.mark.asyncio
    @respx.mock
    async def test_posts_fcm_v1_message(self, httpx_client):
        route = respx.post(FCM_URL).respond(200, json={"name": "projects/fcm-proj/messages/1"})

        client = FcmPushClient(
            httpx_client,
            project_id="fcm-proj",
            token_provider=make_token_provider(),
            timeout_s=2,
        )
        await client.send("device-abc", "Assistant", "Reply", {"chatId": "c1"})

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer ya29.test"
        assert json.loads(request.content) == {
            "message": {
                "token": "device-abc",
                "notification": {"title": "Assistant", "body": "Reply"},
                "data": {"chatId": "c1"},
            }
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_dispatcher_survives_fcm_error(self, httpx_client):
        respx.post(FCM_URL).respond(404, json={"error": {"status": "UNREGISTERED"}})

        client = FcmPushClient(
            httpx_client,
            project_id="fcm-proj",
            token_provider=make_token_provider(),
            timeout_s=2,
        )
        await NotificationDispatcher(_users(), client).notify("u2", NotificationPayload())

    @pytest.mark.asyncio
    @respx.mock
    async def test_expired_token_refreshed_before_send(self, httpx_client):
        route = respx.post(FCM_URL).respond(200, json={"name": "projects/fcm-proj/messages/1"})
        credentials = FakeGoogleCredentials(token="ya29.stale", expires_in=timedelta(hours=-1))

        client = FcmPushClient(
            httpx_client,
            project_id="fcm-proj",
            token_provider=GoogleTokenProvider(credentials, request_factory=lambda: None),
            timeout_s=2,
        )
        await client.send("device-abc", "Assistant", "Reply", {})

        assert credentials.refresh_count == 1
        assert route.calls.last.request.headers["Authorization"] == "Bearer ya29.fresh-1"
