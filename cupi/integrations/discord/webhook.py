"""Best-effort notifications posted to a Discord channel webhook."""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DISCORD_BLURPLE = 0x5865F2


def get_webhook_url() -> Optional[str]:
    """Get the webhook URL from the environment; unset disables notifications."""
    return os.getenv("DISCORD_WEBHOOK_URL") or None


async def send_notification(
    content: str, embeds: Optional[list[dict[str, Any]]] = None
) -> bool:
    """Post a message to the configured webhook.

    Never raises: failures are logged and reported as False so that callers
    can fire and forget.
    """
    url = get_webhook_url()
    if url is None:
        logger.debug("DISCORD_WEBHOOK_URL not set, skipping notification")
        return False

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(
                url, json={"content": content, "embeds": embeds or []}
            )
    except httpx.HTTPError as e:
        logger.error(f"Discord webhook error: {e}")
        return False

    if response.status_code >= 400:
        logger.error(
            f"Failed to send Discord notification: {response.status_code} - {response.text}"
        )
        return False
    return True


async def notify_user_joined(user_name: str) -> bool:
    return await send_notification(
        "",
        [
            {
                "title": "👋 New Team Member",
                "description": f"**{user_name}** has joined the workspace!",
                "color": DISCORD_BLURPLE,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ],
    )
