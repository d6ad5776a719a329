"""Workspace and workspace membership models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .role import Role


class Workspace(BaseModel):
    id: UUID
    name: str
    owner_id: Optional[UUID] = None
    invite_code: str
    discord_channel_id: Optional[str] = None
    created_at: datetime


class WorkspaceMember(BaseModel):
    """A user's membership in a (possibly secondary) workspace.

    The membership role is independent of the user's global role and is the
    authority for workspace-scoped destructive actions.
    """

    user_id: UUID
    workspace_id: UUID
    role: Role
    name: Optional[str] = None
    created_at: datetime


class WorkspaceMembershipSummary(BaseModel):
    """Membership as shown on the current identity, with workspace counts."""

    workspace_id: UUID
    workspace_name: str
    role: Role
    member_count: int = Field(default=0, description="Members in the workspace")
    project_count: int = Field(default=0, description="Projects in the workspace")
