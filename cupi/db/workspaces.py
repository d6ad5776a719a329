"""Database operations for workspaces and workspace memberships."""

import logging
from typing import Optional
from uuid import UUID

from psycopg.errors import UniqueViolation

from cupi.models.role import Role
from cupi.models.workspace import Workspace, WorkspaceMember
from .connection import get_db_cursor

logger = logging.getLogger(__name__)

WORKSPACE_COLUMNS = "id, name, owner_id, invite_code, discord_channel_id, created_at"
MEMBER_COLUMNS = "user_id, workspace_id, role, name, created_at"


class InviteCodeConflictError(Exception):
    """Raised when a generated invite code is already in use."""


def get_workspace(workspace_id: UUID) -> Optional[Workspace]:
    with get_db_cursor() as cursor:
        cursor.execute(
            f"SELECT {WORKSPACE_COLUMNS} FROM workspaces WHERE id = %s",
            (str(workspace_id),),
        )
        row = cursor.fetchone()
        return _row_to_workspace(row) if row else None


def get_workspace_by_invite_code(invite_code: str) -> Optional[Workspace]:
    with get_db_cursor() as cursor:
        cursor.execute(
            f"SELECT {WORKSPACE_COLUMNS} FROM workspaces WHERE invite_code = %s",
            (invite_code,),
        )
        row = cursor.fetchone()
        return _row_to_workspace(row) if row else None


def create_workspace_with_owner(
    name: str, invite_code: str, owner_id: UUID, owner_name: Optional[str]
) -> Workspace:
    """Create a workspace owned by `owner_id`.

    In one transaction: inserts the workspace, adds the owner as an Admin
    member, and makes it the owner's primary workspace with the Admin role.

    Raises:
        InviteCodeConflictError: If `invite_code` is already taken.
    """
    try:
        with get_db_cursor() as cursor:
            cursor.execute(
                f"""
                INSERT INTO workspaces (name, invite_code, owner_id)
                VALUES (%s, %s, %s)
                RETURNING {WORKSPACE_COLUMNS}
                """,
                (name, invite_code, str(owner_id)),
            )
            workspace = _row_to_workspace(cursor.fetchone())
            cursor.execute(
                """
                INSERT INTO workspace_members (user_id, workspace_id, role, name)
                VALUES (%s, %s, 'Admin', %s)
                """,
                (str(owner_id), str(workspace.id), owner_name),
            )
            cursor.execute(
                "UPDATE users SET workspace_id = %s, role = 'Admin' WHERE id = %s",
                (str(workspace.id), str(owner_id)),
            )
    except UniqueViolation as e:
        raise InviteCodeConflictError(f"Invite code {invite_code} is taken") from e

    logger.info(f"Created workspace id={workspace.id} owned by user id={owner_id}")
    return workspace


def get_membership(user_id: UUID, workspace_id: UUID) -> Optional[WorkspaceMember]:
    with get_db_cursor() as cursor:
        cursor.execute(
            f"""
            SELECT {MEMBER_COLUMNS}
            FROM workspace_members
            WHERE user_id = %s AND workspace_id = %s
            """,
            (str(user_id), str(workspace_id)),
        )
        row = cursor.fetchone()
        return _row_to_member(row) if row else None


def create_membership(
    user_id: UUID, workspace_id: UUID, role: Role, name: Optional[str]
) -> WorkspaceMember:
    with get_db_cursor() as cursor:
        cursor.execute(
            f"""
            INSERT INTO workspace_members (user_id, workspace_id, role, name)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (user_id, workspace_id) DO UPDATE SET name = EXCLUDED.name
            RETURNING {MEMBER_COLUMNS}
            """,
            (str(user_id), str(workspace_id), role, name),
        )
        return _row_to_member(cursor.fetchone())


def remove_membership(user_id: UUID, workspace_id: UUID) -> bool:
    """Remove a user from a workspace.

    In one transaction: deletes the membership and, if this was the user's
    primary workspace, unbinds it and resets the user to Member.

    Returns:
        True if a membership was deleted.
    """
    with get_db_cursor() as cursor:
        cursor.execute(
            "DELETE FROM workspace_members WHERE user_id = %s AND workspace_id = %s",
            (str(user_id), str(workspace_id)),
        )
        removed = cursor.rowcount > 0
        cursor.execute(
            """
            UPDATE users SET workspace_id = NULL, role = 'Member'
            WHERE id = %s AND workspace_id = %s
            """,
            (str(user_id), str(workspace_id)),
        )
    if removed:
        logger.info(f"Removed user id={user_id} from workspace id={workspace_id}")
    return removed


def delete_workspace(workspace_id: UUID) -> bool:
    """Delete a workspace.

    Memberships cascade; users whose primary workspace this was keep their
    record with `workspace_id` set to NULL.
    """
    with get_db_cursor() as cursor:
        cursor.execute("DELETE FROM workspaces WHERE id = %s", (str(workspace_id),))
        deleted = cursor.rowcount > 0
    if deleted:
        logger.info(f"Deleted workspace id={workspace_id}")
    return deleted


def update_discord_channel(workspace_id: UUID, channel_id: Optional[str]) -> bool:
    with get_db_cursor() as cursor:
        cursor.execute(
            "UPDATE workspaces SET discord_channel_id = %s WHERE id = %s",
            (channel_id, str(workspace_id)),
        )
        return cursor.rowcount > 0


def _row_to_workspace(row) -> Workspace:
    id, name, owner_id, invite_code, discord_channel_id, created_at = row
    return Workspace(
        id=id,
        name=name,
        owner_id=owner_id,
        invite_code=invite_code,
        discord_channel_id=discord_channel_id,
        created_at=created_at,
    )


def _row_to_member(row) -> WorkspaceMember:
    user_id, workspace_id, role, name, created_at = row
    return WorkspaceMember(
        user_id=user_id,
        workspace_id=workspace_id,
        role=role,
        name=name,
        created_at=created_at,
    )
