from .auth import router as auth_router
from .oauth import router as oauth_router
from .users import router as users_router
from .workspaces import router as workspaces_router

__all__ = [
    "auth_router",
    "oauth_router",
    "users_router",
    "workspaces_router",
]
