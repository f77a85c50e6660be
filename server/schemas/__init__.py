"""Pydantic schemas for API requests and responses."""

from server.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    IdentityResponse,
    LogoutResponse
)
from server.schemas.files import (
    FileRecordResponse,
    ListFilesResponse,
    TransferRequest,
    ShareRequest,
    DeleteFileResponse
)
from server.schemas.common import ErrorResponse

__all__ = [
    "RegisterRequest",
    "RegisterResponse",
    "LoginRequest",
    "LoginResponse",
    "IdentityResponse",
    "LogoutResponse",
    "FileRecordResponse",
    "ListFilesResponse",
    "TransferRequest",
    "ShareRequest",
    "DeleteFileResponse",
    "ErrorResponse"
]
