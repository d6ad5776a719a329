"""Discord OAuth authentication functions."""

import os
from urllib.parse import urlencode
import logging

import httpx
from pydantic import ValidationError

from .models import DiscordToken, DiscordUser

OAUTH_URL = "https://discord.com/api/oauth2/authorize"
TOKEN_URL = "https://discord.com/api/oauth2/token"
USER_URL = "https://discord.com/api/users/@me"
SCOPE = "identify email"

CLIENT_ID = os.environ["DISCORD_CLIENT_ID"]
CLIENT_SECRET = os.environ["DISCORD_CLIENT_SECRET"]
PUBLIC_API_BASE_URL = os.environ["PUBLIC_API_BASE_URL"]
REDIRECT_URI = os.getenv(
    "DISCORD_REDIRECT_URI", f"{PUBLIC_API_BASE_URL}/discord/callback"
)

logger = logging.getLogger(__name__)


class DiscordAPIError(Exception):
    """Raised when a call to the Discord API fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


async def exchange_code_for_token(code: str) -> DiscordToken:
    """Exchange a Discord authorization code for an access token.

    Args:
        code: The authorization code from the OAuth callback.

    Returns:
        DiscordToken: The bearer token and its lifetime.

    Raises:
        DiscordAPIError: If the request fails or Discord rejects the code.
            Also raised when the response body is not a valid token.
    """
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(
                TOKEN_URL,
                data={
                    "client_id": CLIENT_ID,
                    "client_secret": CLIENT_SECRET,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": REDIRECT_URI,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
    except httpx.HTTPError as e:
        raise DiscordAPIError(f"Discord token request failed: {e}") from e

    if response.status_code != 200:
        logger.error(
            f"Failed to exchange Discord code: {response.status_code} - {response.text}"
        )
        raise DiscordAPIError(
            f"Failed to exchange Discord code (status {response.status_code})",
            status_code=response.status_code,
        )
    try:
        return DiscordToken.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.error(f"Unexpected Discord token response: {response.text}")
        raise DiscordAPIError(f"Malformed Discord token response: {e}") from e


async def fetch_current_user(access_token: str) -> DiscordUser:
    """Fetch the profile of the user who owns `access_token`.

    Raises:
        DiscordAPIError: If the request fails or the token is rejected.
            Also raised when the response body is not a valid profile.
    """
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(
                USER_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
    except httpx.HTTPError as e:
        raise DiscordAPIError(f"Discord profile request failed: {e}") from e

    if response.status_code != 200:
        raise DiscordAPIError(
            f"Failed to fetch Discord user (status {response.status_code})",
            status_code=response.status_code,
        )
    try:
        return DiscordUser.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise DiscordAPIError(f"Malformed Discord user response: {e}") from e


def build_oauth_authorize_url(state: str | None = None) -> str:
    params = {
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": SCOPE,
    }
    if state is not None:
        params["state"] = state
    url = f"{OAUTH_URL}?{urlencode(params)}"
    logger.info(f"Building OAuth authorize URL: {url}")
    return url
