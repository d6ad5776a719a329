from typing import Callable, Optional
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from cupi.app.app import app
from cupi.app.session import (
    AUTH_FLOW_COOKIE,
    DISCORD_TOKEN_COOKIE,
    DISCORD_USER_COOKIE,
    ONE_WEEK,
    TEN_MINUTES,
    USER_ID_COOKIE,
    AuthFlowState,
    encode_cookie,
)
from cupi.integrations.discord.models import DiscordUser


def session_cookies(
    user_id: Optional[UUID] = None,
    discord_user: Optional[DiscordUser] = None,
    discord_token: Optional[str] = None,
    auth_flow: Optional[AuthFlowState] = None,
) -> dict[str, str]:
    """Signed session cookies, as the API itself would have set them."""
    cookies = {}
    if user_id is not None:
        cookies[USER_ID_COOKIE] = encode_cookie(USER_ID_COOKIE, str(user_id), ONE_WEEK)
    if discord_user is not None:
        cookies[DISCORD_USER_COOKIE] = encode_cookie(
            DISCORD_USER_COOKIE, discord_user.model_dump(), ONE_WEEK
        )
    if discord_token is not None:
        cookies[DISCORD_TOKEN_COOKIE] = encode_cookie(
            DISCORD_TOKEN_COOKIE, discord_token, ONE_WEEK
        )
    if auth_flow is not None:
        cookies[AUTH_FLOW_COOKIE] = encode_cookie(
            AUTH_FLOW_COOKIE, auth_flow.model_dump(), TEN_MINUTES
        )
    return cookies


def deleted_cookies(response) -> set[str]:
    """Names of the cookies a response tells the browser to delete."""
    names = set()
    for header in response.headers.get_list("set-cookie"):
        name = header.split("=", 1)[0]
        if "Max-Age=0" in header:
            names.add(name)
    return names


@pytest.fixture
def client() -> TestClient:
    """Client without any session cookies."""
    return TestClient(app)


@pytest.fixture
def session_client() -> Callable[..., TestClient]:
    """Build a client carrying the given session cookies."""

    def make(**kwargs) -> TestClient:
        return TestClient(app, cookies=session_cookies(**kwargs))

    return make
