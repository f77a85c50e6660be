"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, Field

# Usernames are share and transfer targets, and the CLI passes them
# comma-separated when revoking.
USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=1)


class RegisterRequest(Credentials):
    """Request model for user registration."""


class LoginRequest(Credentials):
    """Request model for user login."""


class IdentityResponse(BaseModel):
    """The caller's principal."""
    user_id: str
    username: str


class RegisterResponse(IdentityResponse):
    """Response model for user registration."""
    api_key: str


class LoginResponse(IdentityResponse):
    """Response model for user login; the previous key stops working."""
    api_key: str


class LogoutResponse(BaseModel):
    logged_out: bool
