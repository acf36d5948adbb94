"""Tests for the outbound HTTP clients, using httpx.MockTransport."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from src.tm_notify.domain.models import PushMessage
from src.tm_notify.infrastructure.push_gateway import PushGatewayClient
from src.tm_notify.infrastructure.pushover import PushoverClient

GATEWAY_URL = "https://push.example.test/v1/multicast"


def _client(handler) -> httpx.AsyncClient:  # type: ignore[no-untyped-def]
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPushGateway:
    async def test_visible_message_payload(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success_count": 2, "failure_count": 1})

        client = PushGatewayClient(GATEWAY_URL, "key-1", http=_client(handler))
        msg = PushMessage(data={"type": "queue_join"}, title="Hi", body="There")

        result = await client.send_multicast(["a", "b", "c"], msg)

        assert (result.success_count, result.failure_count) == (2, 1)
        body = json.loads(seen[0].content)
        assert body["tokens"] == ["a", "b", "c"]
        assert body["notification"] == {"title": "Hi", "body": "There"}
        assert seen[0].headers["Authorization"] == "Bearer key-1"
        await client.close()

    async def test_silent_message_has_no_notification(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success_count": 1})

        client = PushGatewayClient(GATEWAY_URL, http=_client(handler))
        result = await client.send_multicast(["a"], PushMessage(data={"k": "v"}))

        assert "notification" not in json.loads(seen[0].content)
        assert "Authorization" not in seen[0].headers
        assert result.failure_count == 0

    async def test_error_status_raises(self) -> None:
        client = PushGatewayClient(
            GATEWAY_URL, http=_client(lambda request: httpx.Response(503, text="busy"))
        )
        with pytest.raises(httpx.HTTPStatusError):
            await client.send_multicast(["a"], PushMessage(data={}))

    async def test_empty_batch_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = PushGatewayClient(GATEWAY_URL, http=_client(handler))
        result = await client.send_multicast([], PushMessage(data={}))
        assert result.success_count == 0

    def test_is_configured(self) -> None:
        assert PushGatewayClient(GATEWAY_URL).is_configured
        assert not PushGatewayClient(None).is_configured


class TestPushover:
    async def test_posts_form_encoded_alert(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": 1})

        client = PushoverClient("user-key", "app-token", http=_client(handler))

        assert await client.send("Title", "Ann joined the match queue") is True
        request = seen[0]
        assert str(request.url) == PushoverClient.PUSHOVER_API_URL
        form = parse_qs(request.content.decode())
        assert form == {
            "token": ["app-token"],
            "user": ["user-key"],
            "title": ["Title"],
            "message": ["Ann joined the match queue"],
            "priority": ["0"],
        }

    async def test_rejection_logged_with_body(self, caplog: pytest.LogCaptureFixture) -> None:
        client = PushoverClient(
            "user-key",
            "app-token",
            http=_client(lambda request: httpx.Response(400, text='{"errors":["user invalid"]}')),
        )
        assert await client.send("T", "M") is False
        assert "user invalid" in caplog.text

    async def test_transport_error_returns_false(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = PushoverClient("user-key", "app-token", http=_client(handler))
        assert await client.send("T", "M") is False

    @pytest.mark.parametrize("user,token", [(None, "t"), ("u", None), ("", "")])
    async def test_missing_credentials_skip(self, user: str | None, token: str | None) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = PushoverClient(user, token, http=_client(handler))
        assert client.is_configured is False
        assert await client.send("T", "M") is False
