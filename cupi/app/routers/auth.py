"""Session lifecycle: login intent, onboarding, logout and account deletion."""

import os
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response
from fastapi.responses import JSONResponse, RedirectResponse

from cupi.app.auth import get_current_identity
from cupi.app.models import (
    AuthFlowRequest,
    RegisterRequest,
    RegistrationResponse,
    StatusResponse,
)
from cupi.app.results import error_response, raise_for_result
from cupi.app.session import (
    AuthFlowState,
    SessionState,
    clear_session,
    get_session,
    set_auth_flow,
    set_user_id,
)
from cupi.identity.deletion import delete_account
from cupi.identity.registration import register
from cupi.integrations import discord
from cupi.models.identity import CurrentIdentity

PUBLIC_API_BASE_URL = os.environ["PUBLIC_API_BASE_URL"]
PUBLIC_DASHBOARD_BASE_URL = os.environ["PUBLIC_DASHBOARD_BASE_URL"]

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/flow")
def start_auth_flow(request: AuthFlowRequest) -> RedirectResponse:
    """Remember a create/join intent and send the user to Discord login."""
    value = request.value.strip()
    if request.mode == "join":
        value = value.upper()
    if not value:
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_input", "message": "A value is required"},
        )

    flow = AuthFlowState(mode=request.mode, value=value, username=request.username)
    response = RedirectResponse(f"{PUBLIC_API_BASE_URL}/discord/login", status_code=303)
    set_auth_flow(response, flow)
    return response


@router.get("/me", response_model=CurrentIdentity)
def read_current_identity(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> CurrentIdentity:
    """Get the identity of the caller: anonymous, pending, or registered."""
    return identity


@router.post("/register", response_model=RegistrationResponse)
def register_user(
    request: RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    session: SessionState = Depends(get_session),
) -> RegistrationResponse:
    """Complete onboarding for the Discord identity in the session.

    Sets the `user_id` cookie on success. The "user joined" notification is
    sent after the response and only the first time a user is onboarded.
    """
    result = register(
        session.discord_user, request.name, request.skills, request.interests
    )
    raise_for_result(result)

    set_user_id(response, result.user_id)  # type: ignore[arg-type]
    if result.newly_onboarded:
        background_tasks.add_task(discord.notify_user_joined, request.name.strip())
    return RegistrationResponse(success=True, user_id=result.user_id)  # type: ignore[arg-type]


@router.post("/logout", response_model=StatusResponse)
def logout(response: Response) -> StatusResponse:
    """Clear every session cookie."""
    clear_session(response)
    return StatusResponse()


@router.get("/logout")
def logout_and_redirect() -> RedirectResponse:
    """Clear every session cookie and go back to the dashboard."""
    response = RedirectResponse(PUBLIC_DASHBOARD_BASE_URL)
    clear_session(response)
    return response


@router.delete("/account", response_model=StatusResponse)
def delete_own_account(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> JSONResponse:
    """Delete the caller's account.

    Authored content is kept and attributed to "Deleted User". Session cookies
    are cleared unless the store failed, so the user can retry.
    """
    result = delete_account(identity)
    if result.success:
        response = JSONResponse(
            StatusResponse(message=result.message).model_dump()
        )
    else:
        response = error_response(result)
    if result.error != "persistence_failure":
        clear_session(response)
    return response
