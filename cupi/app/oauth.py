"""Session-cookie identity dependencies for routers."""

import logging

from fastapi import Depends, HTTPException, status

from cupi.identity.resolver import resolve_identity
from cupi.models.identity import CurrentIdentity, RegisteredIdentity
from .session import SessionState, get_session

logger = logging.getLogger(__name__)


def get_current_identity(
    session: SessionState = Depends(get_session),
) -> CurrentIdentity:
    """FastAPI dependency resolving the caller of the current request.

    Never raises; a caller without a valid session is anonymous.
    """
    return resolve_identity(session)


def require_registered(
    identity: CurrentIdentity = Depends(get_current_identity),
) -> RegisteredIdentity:
    """FastAPI dependency requiring a registered user.

    Raises:
        HTTPException 401 if the caller is anonymous or still pending.
    """
    if not isinstance(identity, RegisteredIdentity):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Cookie"},
        )
    return identity


def require_admin(
    identity: RegisteredIdentity = Depends(require_registered),
) -> RegisteredIdentity:
    """FastAPI dependency requiring the global Admin role.

    Raises:
        HTTPException 403 if the user is not an Admin.
    """
    if identity.role != "Admin":
        logger.warning(f"User id={identity.id} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return identity
