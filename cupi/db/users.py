"""Database operations for user management."""

import logging
from typing import Optional
from uuid import UUID

from psycopg.errors import UniqueViolation

from cupi.integrations.discord.models import placeholder_email
from cupi.models.role import Role
from cupi.models.user import User, UserWithWorkspaces
from cupi.models.workspace import WorkspaceMembershipSummary
from .connection import get_db_cursor

logger = logging.getLogger(__name__)

USER_COLUMNS = """
    id, discord_id, email, name, avatar, role, workspace_id,
    onboarded, skills, interests, created_at, updated_at
"""


class UserConflictError(Exception):
    """Raised when a new user collides with an existing Discord id or email."""


def get_user_by_id(user_id: UUID) -> Optional[User]:
    with get_db_cursor() as cursor:
        cursor.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = %s",
            (str(user_id),),
        )
        row = cursor.fetchone()
        return _row_to_user(row) if row else None


def get_user_with_workspaces(user_id: UUID) -> Optional[UserWithWorkspaces]:
    """Get a user with its primary workspace name and all memberships.

    Each membership carries the member and project counts of its workspace.
    """
    with get_db_cursor() as cursor:
        cursor.execute(
            """
            SELECT u.id, u.discord_id, u.email, u.name, u.avatar, u.role,
                   u.workspace_id, u.onboarded, u.skills, u.interests,
                   u.created_at, u.updated_at, w.name
            FROM users u
            LEFT JOIN workspaces w ON w.id = u.workspace_id
            WHERE u.id = %s
            """,
            (str(user_id),),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        user = _row_to_user(row[:-1])
        workspace_name = row[-1]

        cursor.execute(
            """
            SELECT m.workspace_id, w.name, m.role,
                   (SELECT COUNT(*) FROM workspace_members wm
                    WHERE wm.workspace_id = m.workspace_id),
                   (SELECT COUNT(*) FROM projects p
                    WHERE p.workspace_id = m.workspace_id)
            FROM workspace_members m
            JOIN workspaces w ON w.id = m.workspace_id
            WHERE m.user_id = %s
            ORDER BY m.created_at
            """,
            (str(user_id),),
        )
        memberships = [
            WorkspaceMembershipSummary(
                workspace_id=workspace_id,
                workspace_name=name,
                role=role,
                member_count=member_count,
                project_count=project_count,
            )
            for workspace_id, name, role, member_count, project_count in cursor.fetchall()
        ]

    return UserWithWorkspaces(
        **user.model_dump(), workspace_name=workspace_name, memberships=memberships
    )


def find_user_for_discord_identity(
    discord_id: str, email: Optional[str]
) -> Optional[User]:
    """Find the user that a Discord identity maps to.

    Matches on any of: the Discord id, the email Discord shared, or the
    placeholder email derived from the Discord id. Users created before the
    Discord id was stored are only reachable through their email, so a match
    on `discord_id` wins when several rows qualify.
    """
    fallback_email = placeholder_email(discord_id)
    with get_db_cursor() as cursor:
        cursor.execute(
            f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE discord_id = %s OR email = %s OR email = %s
            ORDER BY (discord_id = %s) DESC NULLS LAST, created_at
            LIMIT 1
            """,
            (discord_id, email or fallback_email, fallback_email, discord_id),
        )
        row = cursor.fetchone()
        return _row_to_user(row) if row else None


def create_user(
    discord_id: Optional[str],
    email: str,
    name: Optional[str],
    avatar: Optional[str],
    onboarded: bool = False,
    skills: Optional[list[str]] = None,
    interests: Optional[str] = None,
) -> User:
    """Create a new user record.

    The user is created as a Member, then tries to claim the singleton
    `bootstrap_admin` row in the same transaction. Only the first user ever
    committed can claim it, and that user is promoted to Admin.

    Raises:
        UserConflictError: If the Discord id or email is already taken.
    """
    logger.info(f"Creating new user with discord_id={discord_id}, name={name}")

    try:
        with get_db_cursor() as cursor:
            cursor.execute(
                f"""
                INSERT INTO users
                    (discord_id, email, name, avatar, role, onboarded, skills, interests)
                VALUES (%s, %s, %s, %s, 'Member', %s, %s, %s)
                RETURNING {USER_COLUMNS}
                """,
                (discord_id, email, name, avatar, onboarded, skills or [], interests),
            )
            user = _row_to_user(cursor.fetchone())

            cursor.execute(
                """
                INSERT INTO bootstrap_admin (user_id)
                VALUES (%s)
                ON CONFLICT DO NOTHING
                RETURNING user_id
                """,
                (str(user.id),),
            )
            if cursor.fetchone() is not None:
                cursor.execute(
                    f"UPDATE users SET role = 'Admin' WHERE id = %s RETURNING {USER_COLUMNS}",
                    (str(user.id),),
                )
                user = _row_to_user(cursor.fetchone())
                logger.info(f"User id={user.id} is the first user and was made Admin")
    except UniqueViolation as e:
        raise UserConflictError(
            f"A user already exists for discord_id={discord_id} or email={email}"
        ) from e

    logger.info(f"Created user id={user.id} with role={user.role}")
    return user


def complete_onboarding(
    user_id: UUID,
    discord_id: str,
    name: str,
    skills: list[str],
    interests: Optional[str],
) -> Optional[User]:
    """Record the onboarding form on an existing user.

    Role and workspace are left untouched. The Discord id is only filled in
    when the row does not have one yet.

    Returns:
        The updated User, or None if the user no longer exists.
    """
    with get_db_cursor() as cursor:
        cursor.execute(
            f"""
            UPDATE users
            SET name = %s,
                skills = %s,
                interests = %s,
                onboarded = TRUE,
                discord_id = COALESCE(discord_id, %s)
            WHERE id = %s
            RETURNING {USER_COLUMNS}
            """,
            (name, skills, interests, discord_id, str(user_id)),
        )
        row = cursor.fetchone()
        return _row_to_user(row) if row else None


def refresh_discord_link(user_id: UUID, discord_id: str, avatar: Optional[str]) -> None:
    """Keep the Discord id and avatar in sync on each Discord login."""
    with get_db_cursor() as cursor:
        cursor.execute(
            """
            UPDATE users
            SET discord_id = %s, avatar = %s
            WHERE id = %s
            """,
            (discord_id, avatar, str(user_id)),
        )


def update_display_name(user_id: UUID, name: str) -> bool:
    with get_db_cursor() as cursor:
        cursor.execute(
            "UPDATE users SET name = %s WHERE id = %s",
            (name, str(user_id)),
        )
        return cursor.rowcount > 0


def update_user_role(user_id: UUID, role: Role) -> bool:
    with get_db_cursor() as cursor:
        cursor.execute(
            "UPDATE users SET role = %s WHERE id = %s",
            (role, str(user_id)),
        )
        updated = cursor.rowcount > 0
    if updated:
        logger.info(f"Changed role of user id={user_id} to {role}")
    return updated


def set_primary_workspace(
    user_id: UUID, workspace_id: Optional[UUID], role: Role
) -> None:
    """Point the user's denormalized workspace at `workspace_id` with `role`."""
    with get_db_cursor() as cursor:
        cursor.execute(
            "UPDATE users SET workspace_id = %s, role = %s WHERE id = %s",
            (str(workspace_id) if workspace_id else None, role, str(user_id)),
        )


def count_workspace_admins(workspace_id: Optional[UUID]) -> int:
    """Count users whose primary workspace is `workspace_id` and who are Admin."""
    with get_db_cursor() as cursor:
        cursor.execute(
            """
            SELECT COUNT(*) FROM users
            WHERE role = 'Admin' AND workspace_id IS NOT DISTINCT FROM %s
            """,
            (str(workspace_id) if workspace_id else None,),
        )
        row = cursor.fetchone()
        return row[0] if row else 0


def anonymize_and_delete_user(user_id: UUID, placeholder_name: str) -> bool:
    """Anonymize a user's authored content, then delete the user.

    Activity logs, comments and chat messages keep a snapshot of the author's
    name taken at write time. Rows are matched on that snapshot: a row whose
    actor reference points at the user, or whose reference is already gone
    but whose snapshot equals the user's current name, is rewritten to
    `placeholder_name`. The foreign keys on those tables are
    ON DELETE SET NULL, so the rows themselves survive the user.

    All statements run in a single transaction, in this order.

    Returns:
        True if a user row was deleted, False if it was already gone.
    """
    with get_db_cursor() as cursor:
        cursor.execute(
            "SELECT name FROM users WHERE id = %s FOR UPDATE", (str(user_id),)
        )
        row = cursor.fetchone()
        name = row[0] if row else None

        cursor.execute(
            """
            UPDATE activity_logs SET changed_by_name = %s
            WHERE changed_by = %s
               OR (changed_by IS NULL AND changed_by_name = %s)
            """,
            (placeholder_name, str(user_id), name),
        )
        logs = cursor.rowcount
        cursor.execute(
            """
            UPDATE comments SET author_name = %s
            WHERE author_id = %s
               OR (author_id IS NULL AND author_name = %s)
            """,
            (placeholder_name, str(user_id), name),
        )
        comments = cursor.rowcount
        cursor.execute(
            """
            UPDATE general_chat_messages SET author_name = %s
            WHERE author_id = %s
               OR (author_id IS NULL AND author_name = %s)
            """,
            (placeholder_name, str(user_id), name),
        )
        messages = cursor.rowcount
        cursor.execute("DELETE FROM users WHERE id = %s", (str(user_id),))
        deleted = cursor.rowcount > 0

    logger.info(
        f"Deleted user id={user_id} (anonymized {logs} activity logs, "
        f"{comments} comments, {messages} chat messages)"
    )
    return deleted


def _row_to_user(row) -> User:
    """Convert a database row to a User object."""
    (
        id,
        discord_id,
        email,
        name,
        avatar,
        role,
        workspace_id,
        onboarded,
        skills,
        interests,
        created_at,
        updated_at,
    ) = row
    return User(
        id=id,
        discord_id=discord_id,
        email=email,
        name=name,
        avatar=avatar,
        role=role,
        workspace_id=workspace_id,
        onboarded=onboarded,
        skills=skills or [],
        interests=interests,
        created_at=created_at,
        updated_at=updated_at,
    )
