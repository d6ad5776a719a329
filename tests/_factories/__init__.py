from .discord_user import DiscordUserFactory
from .user import UserFactory
from .workspace import WorkspaceFactory

__all__ = [
    "DiscordUserFactory",
    "UserFactory",
    "WorkspaceFactory",
]
