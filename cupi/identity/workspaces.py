"""Binding registered users to workspaces."""

import logging
import secrets
from uuid import UUID

import psycopg

from cupi.db import users as users_db
from cupi.db import workspaces as workspaces_db
from cupi.models.identity import CurrentIdentity, RegisteredIdentity
from cupi.models.results import WorkspaceResult

logger = logging.getLogger(__name__)

# No 0/O or 1/I, so codes can be read aloud.
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6
MAX_INVITE_CODE_ATTEMPTS = 10


def generate_invite_code() -> str:
    return "".join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )


def create_workspace(identity: CurrentIdentity, name: str) -> WorkspaceResult:
    """Create a workspace owned by the caller, who becomes its Admin."""
    if not isinstance(identity, RegisteredIdentity):
        return WorkspaceResult.failure("unauthenticated", "Not authenticated")

    name = (name or "").strip()
    if not name:
        return WorkspaceResult.failure("invalid_input", "Workspace name is required")

    try:
        for _ in range(MAX_INVITE_CODE_ATTEMPTS):
            try:
                workspace = workspaces_db.create_workspace_with_owner(
                    name, generate_invite_code(), identity.id, identity.name
                )
                break
            except workspaces_db.InviteCodeConflictError:
                continue
        else:
            logger.error("Could not generate a unique invite code")
            return WorkspaceResult.failure(
                "persistence_failure",
                "Failed to create workspace. Could not generate unique code.",
            )
    except psycopg.Error:
        logger.exception(f"Failed to create workspace for user id={identity.id}")
        return WorkspaceResult.failure(
            "persistence_failure", "Failed to create workspace. Please try again."
        )

    return WorkspaceResult(success=True, workspace_id=workspace.id)


def join_workspace(identity: CurrentIdentity, invite_code: str) -> WorkspaceResult:
    """Join a workspace by invite code and make it the primary workspace.

    Rejoining keeps the existing membership role.
    """
    if not isinstance(identity, RegisteredIdentity):
        return WorkspaceResult.failure("unauthenticated", "Not authenticated")

    code = (invite_code or "").strip().upper()
    if not code:
        return WorkspaceResult.failure("invalid_input", "Invite code is required")

    try:
        workspace = workspaces_db.get_workspace_by_invite_code(code)
        if workspace is None:
            return WorkspaceResult.failure("not_found", "Invalid invite code")

        membership = workspaces_db.get_membership(identity.id, workspace.id)
        if membership is None:
            membership = workspaces_db.create_membership(
                identity.id, workspace.id, "Member", identity.name
            )
            message = None
        else:
            message = f"Welcome back! You are already a member of {workspace.name}."

        users_db.set_primary_workspace(identity.id, workspace.id, membership.role)
    except psycopg.Error:
        logger.exception(f"Failed to join workspace with code {code}")
        return WorkspaceResult.failure("persistence_failure", "Failed to join workspace.")

    logger.info(f"User id={identity.id} joined workspace id={workspace.id}")
    return WorkspaceResult(success=True, workspace_id=workspace.id, message=message)


def switch_workspace(identity: CurrentIdentity, workspace_id: UUID) -> WorkspaceResult:
    """Make another workspace the caller is a member of their primary one."""
    if not isinstance(identity, RegisteredIdentity):
        return WorkspaceResult.failure("unauthenticated", "Not authenticated")

    try:
        membership = workspaces_db.get_membership(identity.id, workspace_id)
        if membership is None:
            return WorkspaceResult.failure(
                "forbidden", "Not a member of this workspace"
            )
        users_db.set_primary_workspace(identity.id, workspace_id, membership.role)
    except psycopg.Error:
        logger.exception(f"Failed to switch to workspace id={workspace_id}")
        return WorkspaceResult.failure(
            "persistence_failure", "Failed to switch workspace"
        )

    return WorkspaceResult(success=True, workspace_id=workspace_id)


def remove_member(identity: CurrentIdentity, user_id: UUID) -> WorkspaceResult:
    """Remove a user from the caller's primary workspace.

    Admins may remove anyone; everyone else may only remove themselves. The
    only Admin of a workspace cannot leave it until another Admin exists.
    The removed user loses that workspace as their primary one and drops back
    to Member.
    """
    if not isinstance(identity, RegisteredIdentity):
        return WorkspaceResult.failure("unauthenticated", "Not authenticated")
    workspace_id = identity.workspace_id
    if workspace_id is None:
        return WorkspaceResult.failure("not_found", "You are not in a workspace")

    removing_self = user_id == identity.id
    if not removing_self and not identity.is_admin:
        logger.warning(
            f"Non-admin user id={identity.id} tried to remove user id={user_id}"
        )
        return WorkspaceResult.failure(
            "forbidden", "Only Admins can remove members"
        )

    try:
        if workspaces_db.get_membership(user_id, workspace_id) is None:
            return WorkspaceResult.failure(
                "not_found", "User is not a member of this workspace"
            )
        if removing_self and identity.is_admin:
            if users_db.count_workspace_admins(workspace_id) <= 1:
                return WorkspaceResult.failure(
                    "forbidden",
                    "Cannot leave workspace: You are the only admin. "
                    "Please assign another admin first.",
                )
        workspaces_db.remove_membership(user_id, workspace_id)
    except psycopg.Error:
        logger.exception(
            f"Failed to remove user id={user_id} from workspace id={workspace_id}"
        )
        return WorkspaceResult.failure(
            "persistence_failure", "Failed to remove user from workspace"
        )

    return WorkspaceResult(success=True, workspace_id=workspace_id)


def leave_workspace(identity: CurrentIdentity) -> WorkspaceResult:
    if not isinstance(identity, RegisteredIdentity):
        return WorkspaceResult.failure("unauthenticated", "Not authenticated")
    return remove_member(identity, identity.id)
