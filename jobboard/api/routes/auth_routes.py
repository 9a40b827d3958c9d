"""
Authentication Routes

POST   /auth/register         - Register new user
POST   /auth/login            - Login and get JWT token
GET    /auth/me               - Get current user info
POST   /auth/forgot-password  - Email a password reset link
POST   /auth/reset-password   - Set a new password using the emailed token
DELETE /auth/account          - Delete the current account
"""

from fastapi import APIRouter, Depends

from jobboard.core.auth import get_current_user
from jobboard.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse,
    ForgotPasswordRequest, ResetPasswordRequest
)
from jobboard.services import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(request: RegisterRequest):
    """
    Register a new user account.

    Employers may pass company_name to create their company right away.
    After registration, login to get an access token.
    """
    auth_service.register(request)
    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    result = auth_service.login(request.email, request.password)
    return TokenResponse(**result)


@router.get("/me", response_model=UserResponse)
def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return UserResponse(**auth_service.get_user(user["user_id"]))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(request: ForgotPasswordRequest):
    return MessageResponse(message=auth_service.request_password_reset(request.email))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: ResetPasswordRequest):
    auth_service.reset_password(request.token, request.password)
    return MessageResponse(message="Password updated. Please login with your new password.")


@router.delete("/account", response_model=MessageResponse)
def delete_account(user: dict = Depends(get_current_user)):
    auth_service.delete_account(user["user_id"])
    return MessageResponse(message="Account deleted")
