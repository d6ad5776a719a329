from __future__ import annotations
from typing import Optional

from pydantic import BaseModel

AVATAR_CDN_URL = "https://cdn.discordapp.com/avatars"
PLACEHOLDER_EMAIL_DOMAIN = "external.user"


def placeholder_email(discord_id: str) -> str:
    """Deterministic email for an external identity that shared no address."""
    return f"external_{discord_id}@{PLACEHOLDER_EMAIL_DOMAIN}"


class DiscordToken(BaseModel):
    """An OAuth token for the Discord API."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None


class DiscordUser(BaseModel):
    """The caller's profile as returned by `GET /users/@me`.

    This is the snapshot kept in the `discord_user` cookie while a caller is
    authenticated with Discord but has not finished onboarding.
    """

    id: str
    username: str
    discriminator: Optional[str] = None
    avatar: Optional[str] = None
    global_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.global_name or self.username

    @property
    def placeholder_email(self) -> str:
        return placeholder_email(self.id)

    @property
    def contact_email(self) -> str:
        """The real email when Discord shared one, else the placeholder."""
        return self.email or self.placeholder_email

    @property
    def avatar_url(self) -> Optional[str]:
        if not self.avatar:
            return None
        return f"{AVATAR_CDN_URL}/{self.id}/{self.avatar}.png"
