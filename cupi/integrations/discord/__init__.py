from .auth import (
    exchange_code_for_token,
    fetch_current_user,
    build_oauth_authorize_url,
    DiscordAPIError,
    CLIENT_ID,
    CLIENT_SECRET,
)
from .models import DiscordToken, DiscordUser, placeholder_email
from .webhook import send_notification, notify_user_joined

__all__ = [
    "exchange_code_for_token",
    "fetch_current_user",
    "build_oauth_authorize_url",
    "DiscordAPIError",
    "DiscordToken",
    "DiscordUser",
    "placeholder_email",
    "send_notification",
    "notify_user_joined",
    "CLIENT_ID",
    "CLIENT_SECRET",
]
