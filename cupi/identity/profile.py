import logging

import psycopg

from cupi.db import users as users_db
from cupi.models.identity import CurrentIdentity, RegisteredIdentity
from cupi.models.results import AccountResult

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50


def update_display_name(identity: CurrentIdentity, new_name: str) -> AccountResult:
    """Rename the caller. Names must be a full name of at most 50 characters."""
    if not isinstance(identity, RegisteredIdentity):
        return AccountResult.failure("unauthenticated", "Not authenticated")

    name = (new_name or "").strip()
    if not name:
        return AccountResult.failure("invalid_input", "Name cannot be empty")
    if " " not in name:
        return AccountResult.failure(
            "invalid_input", "Please enter your full name (First and Last name)"
        )
    if len(name) > MAX_NAME_LENGTH:
        return AccountResult.failure(
            "invalid_input", f"Name must be {MAX_NAME_LENGTH} characters or less"
        )

    try:
        users_db.update_display_name(identity.id, name)
    except psycopg.Error:
        logger.exception(f"Failed to update name for user id={identity.id}")
        return AccountResult.failure("persistence_failure", "Failed to update name")

    return AccountResult(success=True)
