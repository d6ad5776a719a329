"""Resolve who is making a request from its session cookies."""

import logging

from cupi.app.session import SessionState
from cupi.db import users as users_db
from cupi.models.identity import (
    AnonymousIdentity,
    CurrentIdentity,
    PendingIdentity,
    RegisteredIdentity,
)

logger = logging.getLogger(__name__)


def resolve_identity(session: SessionState) -> CurrentIdentity:
    """Resolve the caller's identity.

    1. A `user_id` cookie that points at an existing user resolves to that
       registered user. A stale id falls through to step 2.
    2. A Discord profile cookie resolves to a pending identity.
    3. Anything else is anonymous.

    Never raises. If the user lookup fails the caller is treated as
    anonymous, never as a previous or default identity.
    """
    try:
        if session.user_id is not None:
            user = users_db.get_user_with_workspaces(session.user_id)
            if user is not None:
                return RegisteredIdentity.from_user(user)
            logger.info(f"Session references missing user id={session.user_id}")

        if session.discord_user is not None:
            return PendingIdentity.from_discord_user(session.discord_user)
    except Exception:
        logger.exception("Failed to resolve current identity")

    return AnonymousIdentity()
