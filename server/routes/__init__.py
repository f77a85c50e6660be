"""API routes package."""

from server.routes.auth_routes import router as auth_router
from server.routes.file_routes import router as file_router

__all__ = ["auth_router", "file_router"]
