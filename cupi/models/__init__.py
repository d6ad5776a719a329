from .role import Role, ROLES
from .user import User, UserWithWorkspaces
from .workspace import Workspace, WorkspaceMember, WorkspaceMembershipSummary
from .identity import (
    AnonymousIdentity,
    PendingIdentity,
    RegisteredIdentity,
    CurrentIdentity,
    PENDING_USER_ID,
)
from .results import (
    AccountErrorCode,
    AccountResult,
    RegistrationResult,
    WorkspaceResult,
)

__all__ = [
    "Role",
    "ROLES",
    "User",
    "UserWithWorkspaces",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceMembershipSummary",
    "AnonymousIdentity",
    "PendingIdentity",
    "RegisteredIdentity",
    "CurrentIdentity",
    "PENDING_USER_ID",
    "AccountErrorCode",
    "AccountResult",
    "RegistrationResult",
    "WorkspaceResult",
]
