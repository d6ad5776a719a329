"""Role checks for privileged mutations.

There is no permission hierarchy. Global privileges compare the caller's
role against "Admin"; workspace deletion is decided by workspace ownership
or the caller's membership role in that workspace.
"""

import os
import logging
from typing import Optional, cast
from uuid import UUID

import psycopg

from cupi.db import users as users_db
from cupi.db import workspaces as workspaces_db
from cupi.models.identity import CurrentIdentity, RegisteredIdentity
from cupi.models.results import AccountResult
from cupi.models.role import ROLES, Role
from cupi.models.workspace import Workspace, WorkspaceMember

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"


def is_admin(identity: CurrentIdentity) -> bool:
    return isinstance(identity, RegisteredIdentity) and identity.role == ADMIN_ROLE


def workspace_admins_can_delete() -> bool:
    """Whether a membership Admin who is not the owner may delete a workspace.

    Controlled by WORKSPACE_ADMINS_CAN_DELETE (default: true).
    """
    value = os.getenv("WORKSPACE_ADMINS_CAN_DELETE", "true")
    return value.strip().lower() in ("1", "true", "yes", "on")


def can_delete_workspace(
    user_id: UUID, workspace: Workspace, membership: Optional[WorkspaceMember]
) -> bool:
    if workspace.owner_id == user_id:
        return True
    if not workspace_admins_can_delete():
        return False
    return membership is not None and membership.role == ADMIN_ROLE


def delete_workspace(
    identity: CurrentIdentity, workspace_id: UUID, confirm_name: str
) -> AccountResult:
    """Delete a workspace after checking authority and the typed confirmation.

    The confirmation must match the stored workspace name exactly.
    """
    if not isinstance(identity, RegisteredIdentity):
        return AccountResult.failure("unauthenticated", "Not authenticated")

    try:
        workspace = workspaces_db.get_workspace(workspace_id)
        if workspace is None:
            return AccountResult.failure("not_found", "Workspace not found")

        membership = None
        if workspace.owner_id != identity.id:
            membership = workspaces_db.get_membership(identity.id, workspace_id)
        if not can_delete_workspace(identity.id, workspace, membership):
            logger.warning(
                f"User id={identity.id} may not delete workspace id={workspace_id}"
            )
            return AccountResult.failure(
                "forbidden",
                "You do not have permission to delete this workspace (Owner or Admin required)",
            )

        if workspace.name != confirm_name:
            return AccountResult.failure(
                "invalid_input", "Workspace name confirmation incorrect"
            )

        workspaces_db.delete_workspace(workspace_id)
    except psycopg.Error:
        logger.exception(f"Failed to delete workspace id={workspace_id}")
        return AccountResult.failure(
            "persistence_failure",
            "An unexpected error occurred while deleting the workspace",
        )

    return AccountResult(success=True, message=f"Workspace {workspace.name} deleted")


def change_user_role(
    identity: CurrentIdentity, user_id: UUID, new_role: str
) -> AccountResult:
    """Change another user's (or one's own) global role. Admin only.

    The last Admin of a workspace cannot demote themselves.
    """
    if not isinstance(identity, RegisteredIdentity):
        return AccountResult.failure("unauthenticated", "Not authenticated")
    if not is_admin(identity):
        logger.warning(f"Non-admin user id={identity.id} tried to change a role")
        return AccountResult.failure("forbidden", "Only Admins can change roles")
    if new_role not in ROLES:
        return AccountResult.failure("invalid_input", f"Invalid role: {new_role}")

    try:
        target = users_db.get_user_by_id(user_id)
        if target is None:
            return AccountResult.failure("not_found", "User not found")

        if identity.id == user_id and new_role != ADMIN_ROLE:
            if users_db.count_workspace_admins(identity.workspace_id) <= 1:
                return AccountResult.failure(
                    "forbidden",
                    "Cannot remove your admin role: You are the only admin. "
                    "Please assign another admin first.",
                )

        users_db.update_user_role(user_id, cast(Role, new_role))
    except psycopg.Error:
        logger.exception(f"Failed to update role for user id={user_id}")
        return AccountResult.failure("persistence_failure", "Failed to update role")

    return AccountResult(success=True, message=f"Role changed to {new_role}")


def update_discord_channel(
    identity: CurrentIdentity, channel_id: Optional[str]
) -> AccountResult:
    """Set the Discord channel of the caller's primary workspace. Admin only."""
    if not isinstance(identity, RegisteredIdentity) or identity.workspace_id is None:
        return AccountResult.failure("unauthenticated", "Not authenticated")
    if not is_admin(identity):
        return AccountResult.failure(
            "forbidden", "Only admins can change this setting"
        )

    channel = (channel_id or "").strip() or None
    try:
        workspaces_db.update_discord_channel(identity.workspace_id, channel)
    except psycopg.Error:
        logger.exception(
            f"Failed to update Discord channel for workspace id={identity.workspace_id}"
        )
        return AccountResult.failure(
            "persistence_failure", "Failed to update Discord channel"
        )

    return AccountResult(success=True)
