"""Workspace creation, membership and administration."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from cupi.app.auth import require_admin, require_registered
from cupi.app.models import (
    CreateWorkspaceRequest,
    DeleteWorkspaceRequest,
    DiscordChannelRequest,
    JoinWorkspaceRequest,
    StatusResponse,
    WorkspaceResponse,
)
from cupi.app.results import raise_for_result
from cupi.identity import authorization
from cupi.identity import workspaces as workspace_service
from cupi.models.identity import RegisteredIdentity
from cupi.models.results import WorkspaceResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def _workspace_response(result: WorkspaceResult) -> WorkspaceResponse:
    raise_for_result(result)
    return WorkspaceResponse(
        workspace_id=result.workspace_id,  # type: ignore[arg-type]
        message=result.message,
    )


@router.post("", response_model=WorkspaceResponse, status_code=201)
def create_workspace(
    request: CreateWorkspaceRequest,
    identity: RegisteredIdentity = Depends(require_registered),
) -> WorkspaceResponse:
    """Create a workspace. The caller becomes its owner and Admin."""
    result = workspace_service.create_workspace(identity, request.name)
    if result.success:
        logger.info(f"User id={identity.id} created workspace id={result.workspace_id}")
    return _workspace_response(result)


@router.post("/join", response_model=WorkspaceResponse)
def join_workspace(
    request: JoinWorkspaceRequest,
    identity: RegisteredIdentity = Depends(require_registered),
) -> WorkspaceResponse:
    """Join a workspace by invite code and make it the primary workspace."""
    return _workspace_response(
        workspace_service.join_workspace(identity, request.code)
    )


@router.patch("/current/discord-channel", response_model=StatusResponse)
def set_discord_channel(
    request: DiscordChannelRequest,
    identity: RegisteredIdentity = Depends(require_admin),
) -> StatusResponse:
    """Set the Discord channel of the primary workspace. Requires Admin."""
    result = authorization.update_discord_channel(identity, request.channel_id)
    raise_for_result(result)
    return StatusResponse(message=result.message)


@router.delete("/current/members/{user_id}", response_model=WorkspaceResponse)
def remove_member(
    user_id: UUID,
    identity: RegisteredIdentity = Depends(require_registered),
) -> WorkspaceResponse:
    """Remove a user from the primary workspace. Admins may remove anyone."""
    result = workspace_service.remove_member(identity, user_id)
    if result.success:
        logger.info(
            f"User id={identity.id} removed user id={user_id} "
            f"from workspace id={result.workspace_id}"
        )
    return _workspace_response(result)


@router.post("/current/leave", response_model=WorkspaceResponse)
def leave_workspace(
    identity: RegisteredIdentity = Depends(require_registered),
) -> WorkspaceResponse:
    """Leave the primary workspace."""
    return _workspace_response(workspace_service.leave_workspace(identity))


@router.post("/{workspace_id}/switch", response_model=WorkspaceResponse)
def switch_workspace(
    workspace_id: UUID,
    identity: RegisteredIdentity = Depends(require_registered),
) -> WorkspaceResponse:
    """Make another workspace the caller belongs to their primary one."""
    return _workspace_response(
        workspace_service.switch_workspace(identity, workspace_id)
    )


@router.delete("/{workspace_id}", response_model=StatusResponse)
def delete_workspace(
    workspace_id: UUID,
    request: DeleteWorkspaceRequest,
    identity: RegisteredIdentity = Depends(require_registered),
) -> StatusResponse:
    """Delete a workspace and its memberships.

    Requires being the owner (or a workspace Admin, depending on
    WORKSPACE_ADMINS_CAN_DELETE) and typing the workspace name to confirm.
    """
    result = authorization.delete_workspace(
        identity, workspace_id, request.confirm_name
    )
    raise_for_result(result)
    logger.info(f"User id={identity.id} deleted workspace id={workspace_id}")
    return StatusResponse(message=result.message)
