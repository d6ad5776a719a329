import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from cupi.app.auth import require_admin, require_registered
from cupi.app.models import DisplayNameRequest, RoleChangeRequest, StatusResponse
from cupi.app.results import raise_for_result
from cupi.identity.authorization import change_user_role
from cupi.identity.profile import update_display_name
from cupi.models.identity import RegisteredIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/me/name", response_model=StatusResponse)
def rename_self(
    request: DisplayNameRequest,
    identity: RegisteredIdentity = Depends(require_registered),
) -> StatusResponse:
    """Change the caller's display name (first and last name)."""
    result = update_display_name(identity, request.name)
    raise_for_result(result)
    return StatusResponse(message=result.message)


@router.patch("/{user_id}/role", response_model=StatusResponse)
def set_user_role(
    user_id: UUID,
    request: RoleChangeRequest,
    identity: RegisteredIdentity = Depends(require_admin),
) -> StatusResponse:
    """Change a user's global role. Requires Admin."""
    result = change_user_role(identity, user_id, request.role)
    raise_for_result(result)
    logger.info(f"User id={identity.id} set role of user id={user_id} to {request.role}")
    return StatusResponse(message=result.message)
