"""The resolved identity of the caller of a request.

Every request resolves to exactly one of three shapes, told apart by `kind`:
`anonymous` (no session), `pending` (authenticated with Discord but not yet
a registered user), or `registered` (backed by a User record).
"""

from __future__ import annotations
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from cupi.integrations.discord.models import DiscordUser
from .role import Role
from .user import UserWithWorkspaces
from .workspace import WorkspaceMembershipSummary

PENDING_USER_ID = "pending"


class AnonymousIdentity(BaseModel):
    kind: Literal["anonymous"] = "anonymous"


class PendingIdentity(BaseModel):
    """A Discord identity that has not completed onboarding."""

    kind: Literal["pending"] = "pending"
    id: Literal["pending"] = PENDING_USER_ID
    name: str
    email: str
    avatar: Optional[str] = None
    role: Role = "Member"
    workspace_id: None = None
    discord_user: DiscordUser

    @classmethod
    def from_discord_user(cls, discord_user: DiscordUser) -> PendingIdentity:
        return cls(
            name=discord_user.display_name,
            email=discord_user.placeholder_email,
            avatar=discord_user.avatar_url,
            discord_user=discord_user,
        )


class RegisteredIdentity(BaseModel):
    kind: Literal["registered"] = "registered"
    id: UUID
    name: Optional[str] = None
    email: str
    avatar: Optional[str] = None
    role: Role
    onboarded: bool = False
    workspace_id: Optional[UUID] = None
    workspace_name: Optional[str] = None
    memberships: list[WorkspaceMembershipSummary] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"

    @classmethod
    def from_user(cls, user: UserWithWorkspaces) -> RegisteredIdentity:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            role=user.role,
            onboarded=user.onboarded,
            workspace_id=user.workspace_id,
            workspace_name=user.workspace_name,
            memberships=user.memberships,
        )


CurrentIdentity = Annotated[
    Union[AnonymousIdentity, PendingIdentity, RegisteredIdentity],
    Field(discriminator="kind"),
]
