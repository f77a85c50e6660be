"""Repository layer for data access."""

from server.repositories.user_repository import UserRepository, User
from server.repositories.file_repository import FileRepository

__all__ = [
    "UserRepository",
    "User",
    "FileRepository",
]
