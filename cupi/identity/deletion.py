"""Irreversible self-service account deletion."""

import logging

import psycopg

from cupi.db import users as users_db
from cupi.models.identity import CurrentIdentity, RegisteredIdentity
from cupi.models.results import AccountResult

logger = logging.getLogger(__name__)

DELETED_USER_NAME = "Deleted User"


def delete_account(identity: CurrentIdentity) -> AccountResult:
    """Delete the caller's user record, keeping their content anonymized.

    Activity logs, comments and chat messages authored by the user survive
    with their author name rewritten to "Deleted User". Every step is
    idempotent, so retrying after a failure is safe; a user that is already
    gone counts as deleted.

    Clearing the session cookies is left to the caller.
    """
    if not isinstance(identity, RegisteredIdentity):
        return AccountResult.failure("unauthenticated", "Not authenticated")

    try:
        deleted = users_db.anonymize_and_delete_user(identity.id, DELETED_USER_NAME)
    except psycopg.Error:
        logger.exception(f"Failed to delete account for user id={identity.id}")
        return AccountResult.failure("persistence_failure", "Failed to delete account")

    if not deleted:
        logger.info(f"User id={identity.id} was already deleted")
    return AccountResult(success=True, message="Account deleted")
