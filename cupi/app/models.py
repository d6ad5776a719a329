from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from cupi.integrations.discord.models import DiscordUser
from .env_loader import EnvironmentName


class AuthFlowRequest(BaseModel):
    """What the user intends to do once they come back from Discord."""

    mode: Literal["create", "join"]
    value: str = Field(description="Workspace name to create, or invite code to join")
    username: str = ""


class RegisterRequest(BaseModel):
    name: str
    skills: list[str] = Field(default_factory=list)
    interests: Optional[str] = None


class DisplayNameRequest(BaseModel):
    name: str


class RoleChangeRequest(BaseModel):
    # Checked by the role-change operation so bad values get a structured error.
    role: str


class CreateWorkspaceRequest(BaseModel):
    name: str


class JoinWorkspaceRequest(BaseModel):
    code: str


class DeleteWorkspaceRequest(BaseModel):
    confirm_name: str = Field(description="Must match the workspace name exactly")


class DiscordChannelRequest(BaseModel):
    channel_id: Optional[str] = None


class DiscordUserResponse(BaseModel):
    user: Optional[DiscordUser] = None


class RegistrationResponse(BaseModel):
    success: bool
    user_id: UUID


class StatusResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class WorkspaceResponse(BaseModel):
    success: bool = True
    workspace_id: UUID
    message: Optional[str] = None


class EnvironmentResponse(BaseModel):
    """Response model for the environment endpoint."""

    environment: EnvironmentName
