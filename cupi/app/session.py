"""Signed, scoped, time-bounded session cookies.

Every cookie value is an HS256 JWT signed with SESSION_SECRET. The cookie name
is used as the token audience, so a token minted for one cookie is rejected
when presented in another. A cookie that fails signature, audience, expiry or
payload validation is treated as if it were absent.
"""

import os
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional
from uuid import UUID

import jwt
from fastapi import Request, Response
from pydantic import BaseModel, Field, ValidationError

from cupi.integrations.discord.models import DiscordUser
from .env_loader import is_secure_environment

logger = logging.getLogger(__name__)

USER_ID_COOKIE = "user_id"
DISCORD_USER_COOKIE = "discord_user"
DISCORD_TOKEN_COOKIE = "discord_token"
AUTH_FLOW_COOKIE = "auth_flow"

ONE_WEEK = 60 * 60 * 24 * 7
TEN_MINUTES = 60 * 10

SIGNING_ALGORITHM = "HS256"


class AuthFlowState(BaseModel):
    """Join intent that has to survive the round trip to Discord.

    The nonce doubles as the OAuth `state` parameter.
    """

    mode: Literal["create", "join"]
    value: str
    username: str = ""
    nonce: str = Field(default_factory=lambda: secrets.token_urlsafe(16))


@dataclass
class SessionState:
    """The decoded session cookies of one request."""

    user_id: Optional[UUID] = None
    discord_user: Optional[DiscordUser] = None
    discord_token: Optional[str] = None
    auth_flow: Optional[AuthFlowState] = None


def get_session_secret() -> str:
    """Get the cookie signing secret from environment.

    This is a required environment variable validated at startup.
    """
    return os.environ["SESSION_SECRET"]


def encode_cookie(name: str, value: Any, max_age: int) -> str:
    """Sign `value` for use as the cookie `name`, valid for `max_age` seconds."""
    now = datetime.now(timezone.utc)
    claims = {
        "aud": name,
        "iat": now,
        "exp": now + timedelta(seconds=max_age),
        "val": value,
    }
    return jwt.encode(claims, get_session_secret(), algorithm=SIGNING_ALGORITHM)


def decode_cookie(name: str, token: str) -> Any:
    """Verify a cookie minted by `encode_cookie`.

    Returns the stored value, or None if the token is not valid for `name`.
    """
    try:
        claims = jwt.decode(
            token,
            get_session_secret(),
            algorithms=[SIGNING_ALGORITHM],
            audience=name,
            options={"require": ["exp", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info(f"Ignoring expired {name} cookie")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Ignoring invalid {name} cookie: {e}")
        return None
    return claims.get("val")


def read_session(request: Request) -> SessionState:
    """Decode the session cookies of `request`."""
    session = SessionState()

    raw_user_id = _read(request, USER_ID_COOKIE)
    if raw_user_id is not None:
        try:
            session.user_id = UUID(str(raw_user_id))
        except ValueError:
            logger.warning(f"Ignoring malformed user id in cookie: {raw_user_id}")

    raw_discord_user = _read(request, DISCORD_USER_COOKIE)
    if raw_discord_user is not None:
        try:
            session.discord_user = DiscordUser.model_validate(raw_discord_user)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed Discord profile in cookie: {e}")

    raw_token = _read(request, DISCORD_TOKEN_COOKIE)
    if isinstance(raw_token, str):
        session.discord_token = raw_token

    raw_flow = _read(request, AUTH_FLOW_COOKIE)
    if raw_flow is not None:
        try:
            session.auth_flow = AuthFlowState.model_validate(raw_flow)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed auth flow cookie: {e}")

    return session


def get_session(request: Request) -> SessionState:
    """FastAPI dependency returning the decoded session cookies."""
    return read_session(request)


def set_user_id(response: Response, user_id: UUID) -> None:
    _write(response, USER_ID_COOKIE, str(user_id), ONE_WEEK)


def set_discord_identity(response: Response, discord_user: DiscordUser) -> None:
    _write(response, DISCORD_USER_COOKIE, discord_user.model_dump(), ONE_WEEK)


def set_discord_token(response: Response, access_token: str, max_age: int) -> None:
    _write(response, DISCORD_TOKEN_COOKIE, access_token, max_age)


def set_auth_flow(response: Response, flow: AuthFlowState) -> None:
    _write(response, AUTH_FLOW_COOKIE, flow.model_dump(), TEN_MINUTES)


def clear_auth_flow(response: Response) -> None:
    _delete(response, AUTH_FLOW_COOKIE)


def clear_discord_identity(response: Response) -> None:
    _delete(response, DISCORD_USER_COOKIE)
    _delete(response, DISCORD_TOKEN_COOKIE)


def clear_session(response: Response) -> None:
    """Remove every session cookie. Safe to call repeatedly."""
    _delete(response, USER_ID_COOKIE)
    clear_discord_identity(response)
    clear_auth_flow(response)


def _read(request: Request, name: str) -> Any:
    token = request.cookies.get(name)
    if not token:
        return None
    return decode_cookie(name, token)


def _write(response: Response, name: str, value: Any, max_age: int) -> None:
    response.set_cookie(
        name,
        encode_cookie(name, value, max_age),
        max_age=max_age,
        httponly=True,
        secure=is_secure_environment(),
        samesite="lax",
        path="/",
    )


def _delete(response: Response, name: str) -> None:
    response.delete_cookie(
        name,
        path="/",
        httponly=True,
        secure=is_secure_environment(),
        samesite="lax",
    )
