"""Authentication service for business logic."""

import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from common.logging_config import get_logger
from server.auth import hash_password, verify_password, generate_api_key
from server.exceptions import (
    InvalidCredentialsError,
    InvalidTargetError,
    UserAlreadyExistsError,
)
from server.repositories.user_repository import User, UserRepository
from server.utils import generate_uuid

logger = get_logger(__name__)


class AuthService:
    def __init__(self):
        self.user_repo = UserRepository()

    def register_user(self, username: str, password: str) -> tuple[str, str]:
        logger.info(f"Attempting to register user: {username}")
        existing_user = self.user_repo.get_by_username(username)
        if existing_user is not None:
            logger.warning(f"Registration failed: username '{username}' already exists")
            raise UserAlreadyExistsError(f"Username '{username}' already exists")

        user_id = generate_uuid()
        api_key = generate_api_key()

        try:
            self.user_repo.create_user(
                user_id=user_id,
                username=username,
                password_hash=hash_password(password),
                api_key=api_key,
                created_at=datetime.now(timezone.utc),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"Registration failed due to integrity error: username '{username}'")
            raise UserAlreadyExistsError(f"Username '{username}' already exists")

        logger.info(f"Successfully registered user: {username} [user_id={user_id}]")
        return api_key, user_id

    def login_user(self, username: str, password: str) -> tuple[str, str]:
        """
        Verify credentials and rotate the API key.

        Returns:
            (new_api_key, user_id)
        """
        logger.info(f"Login attempt for user: {username}")
        user = self.user_repo.get_by_username(username)
        if user is None:
            logger.warning(f"Login failed: username '{username}' not found")
            raise InvalidCredentialsError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        new_api_key = generate_api_key()
        self.user_repo.update_api_key(user.user_id, new_api_key, datetime.now(timezone.utc))
        logger.info(f"Successfully logged in user: {username} [user_id={user.user_id}]")

        return new_api_key, user.user_id

    def logout_user(self, user_id: str) -> None:
        """
        Revoke the caller's API key. A new one is issued on the next login.
        """
        self.user_repo.update_api_key(user_id, None, datetime.now(timezone.utc))
        logger.info(f"Logged out user [user_id={user_id}]")

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_repo.get_by_user_id(user_id)

    def validate_api_key(self, api_key: str) -> Optional[str]:
        user = self.user_repo.get_by_api_key(api_key)
        if user is None:
            logger.warning("API key validation failed: invalid key")
            return None
        return user.user_id

    def resolve_usernames(self, usernames: Iterable[str]) -> List[str]:
        """
        Map usernames to user ids, preserving order and dropping duplicates.

        Raises:
            InvalidTargetError: If any username is not registered
        """
        user_ids = []
        unknown = []
        for username in dict.fromkeys(usernames):
            user = self.user_repo.get_by_username(username)
            if user is None:
                unknown.append(username)
            else:
                user_ids.append(user.user_id)

        if unknown:
            raise InvalidTargetError(f"Unknown users: {', '.join(unknown)}")
        return user_ids

    def usernames_for(self, user_ids: Iterable[str]) -> dict[str, str]:
        """
        Map user ids to usernames; ids with no user are left out.
        """
        result = {}
        for user_id in set(user_ids):
            user = self.user_repo.get_by_user_id(user_id)
            if user is not None:
                result[user_id] = user.username
        return result
