"""Authentication API routes."""

from fastapi import APIRouter, Depends, status

from server.auth import get_current_user
from server.exceptions import InvalidAPIKeyError
from server.schemas.auth import (
    IdentityResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from server.schemas.common import ErrorResponse
from server.services.auth_service import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={422: {"description": "Username or password fails validation"}},
)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def register(request: RegisterRequest):
    """
    Register a new principal. Usernames are letters, digits, '_', '.' and '-'.

    Returns the new user_id and an API key with the 'sd_' prefix.
    """
    api_key, user_id = AuthService().register_user(request.username, request.password)
    return RegisterResponse(api_key=api_key, user_id=user_id, username=request.username)


@router.post("/login", response_model=LoginResponse, responses={401: {"model": ErrorResponse}})
def login(request: LoginRequest):
    """
    Exchange credentials for a fresh API key. The previous key is revoked.
    """
    api_key, user_id = AuthService().login_user(request.username, request.password)
    return LoginResponse(api_key=api_key, user_id=user_id, username=request.username)


@router.get("/me", response_model=IdentityResponse, responses={401: {"model": ErrorResponse}})
def whoami(current_user: str = Depends(get_current_user)):
    user = AuthService().get_user(current_user)
    if user is None:
        raise InvalidAPIKeyError("Missing or invalid API key")
    return IdentityResponse(user_id=user.user_id, username=user.username)


@router.post("/logout", response_model=LogoutResponse, responses={401: {"model": ErrorResponse}})
def logout(current_user: str = Depends(get_current_user)):
    """
    Revoke the caller's API key. Log in again to get a new one.
    """
    AuthService().logout_user(current_user)
    return LogoutResponse(logged_out=True)
