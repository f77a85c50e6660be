"""Authentication helpers and the request principal resolver."""

import uuid
from typing import Optional

import bcrypt
from fastapi import Header

from common.constants import API_KEY_PREFIX
from server.exceptions import InvalidAPIKeyError


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.
    """
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def generate_api_key() -> str:
    """
    Generate a new API Key with the configured prefix.

    Returns:
        API Key string in format: {prefix}{uuid4}
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


def resolve_principal(authorization: Optional[str]) -> Optional[str]:
    """
    Map an Authorization header value to a user_id.

    Returns:
        user_id, or None for anonymous callers (missing, malformed or unknown key)
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    api_key = authorization[len("Bearer "):].strip()
    if not api_key.startswith(API_KEY_PREFIX):
        return None

    from server.services.auth_service import AuthService

    return AuthService().validate_api_key(api_key)


async def get_current_user(authorization: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to validate API Key and extract user_id.

    Raises:
        InvalidAPIKeyError: If the caller is anonymous
    """
    user_id = resolve_principal(authorization)
    if user_id is None:
        raise InvalidAPIKeyError("Missing or invalid API key")
    return user_id
