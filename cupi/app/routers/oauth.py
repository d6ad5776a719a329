import os
import logging
from typing import Optional
from urllib.parse import urlencode

import psycopg
from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse

from cupi.app.models import DiscordUserResponse, StatusResponse
from cupi.app.session import (
    AuthFlowState,
    SessionState,
    clear_auth_flow,
    clear_discord_identity,
    get_session,
    set_discord_identity,
    set_discord_token,
    set_user_id,
)
from cupi.identity import workspaces as workspace_service
from cupi.identity.registration import RegistrationRaceError, link_discord_identity
from cupi.identity.resolver import resolve_identity
from cupi.integrations import discord
from cupi.models.identity import RegisteredIdentity
from cupi.models.user import User

PUBLIC_DASHBOARD_BASE_URL = os.environ["PUBLIC_DASHBOARD_BASE_URL"]

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discord", tags=["discord"])


def dashboard_redirect(path: str = "/", **params: str) -> RedirectResponse:
    url = f"{PUBLIC_DASHBOARD_BASE_URL.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url)


def is_configured() -> bool:
    return bool(discord.CLIENT_ID and discord.CLIENT_SECRET)


@router.get("/login")
def discord_login(session: SessionState = Depends(get_session)) -> RedirectResponse:
    """Redirect to Discord's authorization page.

    A pending auth flow's nonce is sent as the OAuth `state`.
    """
    if not is_configured():
        return dashboard_redirect(error="not_configured")
    state = session.auth_flow.nonce if session.auth_flow else None
    return RedirectResponse(discord.build_oauth_authorize_url(state=state))


@router.get("/callback")
async def discord_oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    session: SessionState = Depends(get_session),
) -> RedirectResponse:
    """Discord OAuth callback endpoint.

    Stores the Discord profile and token in the session, links or creates the
    matching user, and applies a pending create/join flow. Failures redirect
    to the dashboard with an `error` query parameter and never raise.
    """
    if error is not None:
        logger.warning(f"Discord returned an OAuth error: {error}")
        return _fail("oauth_error")
    if code is None:
        return _fail("no_code")
    if not is_configured():
        return _fail("not_configured")

    try:
        token = await discord.exchange_code_for_token(code)
    except discord.DiscordAPIError as e:
        logger.error(f"Discord token exchange failed: {e}")
        return _fail("token_failed")

    try:
        discord_user = await discord.fetch_current_user(token.access_token)
    except discord.DiscordAPIError as e:
        logger.error(f"Discord user fetch failed: {e}")
        return _fail("user_failed")

    flow = _matching_flow(session.auth_flow, state)
    preferred_name = flow.username.strip() if flow else ""
    try:
        user = link_discord_identity(discord_user, preferred_name or None)
    except (psycopg.Error, RegistrationRaceError):
        logger.exception(f"Failed to link discord_id={discord_user.id} to a user")
        return _fail("oauth_error")

    flow_applied = flow is not None and _apply_flow(user, flow)
    if flow_applied:
        path = "/dashboard"
    elif not user.onboarded:
        path = "/onboarding"
    else:
        path = "/workspaces"

    response = dashboard_redirect(path)
    set_discord_identity(response, discord_user)
    set_discord_token(response, token.access_token, token.expires_in)
    set_user_id(response, user.id)
    clear_auth_flow(response)
    return response


@router.get("/user", response_model=DiscordUserResponse)
def get_discord_user(
    session: SessionState = Depends(get_session),
) -> DiscordUserResponse:
    """Get the Discord profile stored in the session, if any."""
    return DiscordUserResponse(user=session.discord_user)


@router.delete("/user", response_model=StatusResponse)
def delete_discord_user(response: Response) -> StatusResponse:
    """Forget the Discord profile and token, keeping the user session."""
    clear_discord_identity(response)
    return StatusResponse()


def _fail(reason: str) -> RedirectResponse:
    response = dashboard_redirect(error=reason)
    clear_auth_flow(response)
    return response


def _matching_flow(
    flow: Optional[AuthFlowState], state: Optional[str]
) -> Optional[AuthFlowState]:
    if flow is None:
        return None
    if state != flow.nonce:
        logger.warning("OAuth state does not match the auth flow nonce, ignoring flow")
        return None
    return flow


def _apply_flow(user: User, flow: AuthFlowState) -> bool:
    identity = resolve_identity(SessionState(user_id=user.id))
    if not isinstance(identity, RegisteredIdentity):
        return False
    if flow.mode == "create":
        result = workspace_service.create_workspace(identity, flow.value)
    else:
        result = workspace_service.join_workspace(identity, flow.value)
    if not result.success:
        logger.warning(
            f"Auth flow {flow.mode} failed for user id={user.id}: {result.message}"
        )
    return result.success
