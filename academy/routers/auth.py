from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.auth import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminResponse,
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    UserRegistrationRequest,
    UserResponse,
)
from academy.services.auth import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register_user(
    request: UserRegistrationRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    """Create a student account and return a token pair"""
    return auth_service.register_user(request, db)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    return auth_service.login(request, db)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    request: RefreshTokenRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    """Refresh access token using refresh token"""
    return auth_service.refresh_token(request.refresh_token, db)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Get current user information"""
    return UserResponse.model_validate(current_user)


# ==================== ADMIN AUTHENTICATION ====================


@router.post("/admin/login", response_model=AdminAuthResponse)
async def admin_login(
    request: AdminLoginRequest, db: Session = Depends(get_db)
) -> AdminAuthResponse:
    """
    Admin login with username or email and password.

    - **username_or_email**: Admin username or email
    - **password**: Admin password
    """
    return auth_service.admin_login(request, db)


@router.get("/admin/me", response_model=AdminResponse)
async def get_current_admin_info(
    current_admin: Annotated[Admin, Depends(get_current_admin)],
) -> AdminResponse:
    return AdminResponse.model_validate(current_admin)
