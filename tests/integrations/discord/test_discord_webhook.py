"""Tests for best-effort webhook notifications."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from cupi.integrations.discord.webhook import notify_user_joined, send_notification

WEBHOOK_URL = "https://discord.com/api/webhooks/1/abc"


@pytest.mark.asyncio
async def test_skipped_without_webhook_url(monkeypatch):
    monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)

    with patch("httpx.AsyncClient") as mock_client:
        sent = await send_notification("hello")

    assert sent is False
    mock_client.assert_not_called()


@pytest.mark.asyncio
async def test_user_joined_posts_embed(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    mock_response = Mock()
    mock_response.status_code = 204

    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = mock_response

        sent = await notify_user_joined("Jane Doe")

    assert sent is True
    call_args = mock_client_instance.post.call_args
    assert call_args[0][0] == WEBHOOK_URL
    [embed] = call_args[1]["json"]["embeds"]
    assert embed["description"] == "**Jane Doe** has joined the workspace!"


@pytest.mark.asyncio
async def test_http_error_status_is_swallowed(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    mock_response = Mock()
    mock_response.status_code = 404
    mock_response.text = "Unknown Webhook"

    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = mock_response

        assert await send_notification("hello") is False


@pytest.mark.asyncio
async def test_network_error_is_swallowed(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)

    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.side_effect = httpx.ConnectTimeout("timed out")

        assert await send_notification("hello") is False
