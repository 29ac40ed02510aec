"""Unit tests for the infrastructure layer (HTTP client, contact webhook)."""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from infrastructure.http_client import HttpClient
from infrastructure.webhook.discord import DiscordContactNotifier, build_contact_embed


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "post", side_effect=Exception("timeout"))
        with pytest.raises(Exception, match="timeout"):
            await client.post("http://example.com")
        await client.aclose()

    async def test_timeout_applied(self):
        async with HttpClient(timeout=2.5) as client:
            assert client.timeout == 2.5
            assert client._client.timeout.read == 2.5

    async def test_mock_transport(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(201))
        async with HttpClient(transport=transport) as client:
            resp = await client.post("http://example.com", json={})
            assert resp.status_code == 201


# ── DiscordContactNotifier ───────────────────────────────────────────────────


def _notifier(status=204, exc=None, url="https://discord.test/hook"):
    sent = []

    def handler(request):
        sent.append(request)
        if exc is not None:
            raise exc
        return httpx.Response(status)

    client = HttpClient(transport=httpx.MockTransport(handler))
    return DiscordContactNotifier(url, client), sent


class TestDiscordContactNotifier:
    async def test_sends_embed(self):
        notifier, sent = _notifier()
        assert await notifier.send_contact_message("Ana", "ana@example.com", "Hi") is True
        payload = json.loads(sent[0].content)
        fields = payload["embeds"][0]["fields"]
        assert [f["name"] for f in fields] == ["Name", "Email", "Message"]
        assert fields[1]["value"] == "```ana@example.com```"

    async def test_not_configured(self):
        notifier, sent = _notifier(url="")
        assert await notifier.send_contact_message("a", "b", "c") is False
        assert sent == []

    async def test_error_status(self):
        notifier, _ = _notifier(status=500)
        assert await notifier.send_contact_message("a", "b", "c") is False

    async def test_transport_failure(self):
        notifier, _ = _notifier(exc=httpx.ConnectError("refused"))
        assert await notifier.send_contact_message("a", "b", "c") is False


def test_long_message_truncated_in_embed():
    embed = build_contact_embed("n", "e", "x" * 5000)
    value = embed["embeds"][0]["fields"][2]["value"]
    assert len(value) < 1024
