"""User model for application-level user management."""

from __future__ import annotations
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .role import Role
from .workspace import WorkspaceMembershipSummary


class User(BaseModel):
    """Application user with a flat, global role.

    Users are created the first time a Discord identity completes the OAuth
    callback or onboarding, whichever comes first. `discord_id` links the
    record to the external identity and is unique when present.
    """

    id: UUID
    discord_id: Optional[str] = None
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    role: Role = "Member"
    workspace_id: Optional[UUID] = None
    onboarded: bool = False
    skills: list[str] = Field(default_factory=list)
    interests: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_admin(self) -> bool:
        """Check if user has the global Admin role."""
        return self.role == "Admin"


class UserWithWorkspaces(User):
    """A user joined with its primary workspace name and all memberships."""

    workspace_name: Optional[str] = None
    memberships: list[WorkspaceMembershipSummary] = Field(default_factory=list)
