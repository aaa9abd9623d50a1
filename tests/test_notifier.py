"""Unit tests for the Discord webhook notifier."""

import json

import httpx
import pytest

from app.affiliates.models import Affiliate
from app.affiliates.notifier import DiscordNotifier, build_affiliate_embed

WEBHOOK_URL = "https://discord.example/api/webhooks/1/token"


def _affiliate(instagram=None) -> Affiliate:
    return Affiliate(
        code="JOHSMI",
        first_name="John",
        last_name="Smith",
        email="john@example.com",
        phone="+33612345678",
        instagram=instagram,
    )


def test_embed_fields() -> None:
    payload = build_affiliate_embed(_affiliate())
    embed = payload["embeds"][0]
    assert embed["title"] == "🎉 Nouvel affilié enregistré"
    assert embed["color"] == 0x00FF00
    assert [f["name"] for f in embed["fields"]] == ["Code", "Nom", "Email", "Téléphone"]
    assert embed["fields"][1]["value"] == "John Smith"
    assert embed["fields"][2]["inline"] is False
    assert embed["timestamp"].endswith("+00:00")


def test_embed_includes_instagram_when_present() -> None:
    embed = build_affiliate_embed(_affiliate(instagram="@johnsmith"))["embeds"][0]
    assert embed["fields"][-1] == {"name": "Instagram", "value": "@johnsmith", "inline": True}


@pytest.mark.asyncio
async def test_posts_embed_to_webhook() -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    notifier = DiscordNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    assert await notifier.notify_affiliate_created(_affiliate()) is True

    assert len(requests) == 1
    assert str(requests[0].url) == WEBHOOK_URL
    assert requests[0].method == "POST"
    body = json.loads(requests[0].content)
    assert body["embeds"][0]["fields"][0]["value"] == "JOHSMI"


@pytest.mark.asyncio
async def test_skips_when_webhook_not_configured() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("webhook must not be called")

    notifier = DiscordNotifier(None, transport=httpx.MockTransport(handler))
    assert await notifier.notify_affiliate_created(_affiliate()) is False


@pytest.mark.asyncio
async def test_error_status_is_swallowed(caplog) -> None:
    notifier = DiscordNotifier(
        WEBHOOK_URL, transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )
    assert await notifier.notify_affiliate_created(_affiliate()) is False
    assert "Failed to send Discord notification" in caplog.text


@pytest.mark.asyncio
async def test_transport_error_is_swallowed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = DiscordNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    assert await notifier.notify_affiliate_created(_affiliate()) is False


@pytest.mark.asyncio
async def test_unexpected_error_is_swallowed(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("webhook client blew up")

    notifier = DiscordNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    assert await notifier.notify_affiliate_created(_affiliate()) is False
    assert "Failed to send Discord notification" in caplog.text
