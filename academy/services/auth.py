# academy/services/auth.py
import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.hasher import PasswordHelper
from academy.core.security import jwt_manager
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.auth import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminResponse,
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.password_helper = PasswordHelper()

    def register_user(self, request: UserRegistrationRequest, db: Session) -> AuthResponse:
        email = request.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        login_time = datetime.utcnow()
        user = User(
            email=email,
            hashed_password=self.password_helper.hash_password(request.password),
            full_name=request.full_name.strip(),
            is_active=True,
            last_login=login_time,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"New user registered: {user.id}")
        return self._auth_response(user, login_time, message="Registration successful")

    def login(self, request: LoginRequest, db: Session) -> AuthResponse:
        user = db.query(User).filter(User.email == request.email.lower()).first()

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated",
            )

        login_time = datetime.utcnow()
        user.last_login = login_time
        db.commit()
        db.refresh(user)

        logger.info(f"User logged in: {user.id}")
        return self._auth_response(
            user, login_time, remember_me=request.remember_me, message="Login successful"
        )

    def refresh_token(self, refresh_token: str, db: Session) -> AuthResponse:
        payload = jwt_manager.verify_token(refresh_token, "refresh")
        user = db.query(User).filter(User.id == payload.get("user_id")).first()

        if not user or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found or inactive",
            )

        return self._auth_response(
            user, datetime.utcnow(), message="Token refreshed successfully"
        )

    def admin_login(self, request: AdminLoginRequest, db: Session) -> AdminAuthResponse:
        """
        Admin login with username or email and password
        """
        admin = (
            db.query(Admin)
            .filter(
                or_(
                    Admin.username == request.username_or_email,
                    Admin.email == request.username_or_email,
                )
            )
            .first()
        )

        if not admin or not self.password_helper.check_password(
            request.password, admin.password
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        if not admin.is_verified:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin account is not verified",
            )

        access_token = jwt_manager.create_admin_token(admin)
        logger.info(f"Admin logged in: {admin.username}")

        return AdminAuthResponse(
            access_token=access_token,
            expires_in=settings.jwt_admin_expiration * 24 * 3600,
            admin=AdminResponse.model_validate(admin),
            message="Admin login successful",
        )

    def _auth_response(
        self,
        user: User,
        login_time: datetime,
        remember_me: bool = False,
        message: str = "",
    ) -> AuthResponse:
        access_token, refresh_token = jwt_manager.create_token_pair(
            user, remember_me=remember_me, login_time=login_time
        )
        days = 30 if remember_me else settings.jwt_user_expiration
        return AuthResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=days * 24 * 3600,
            user=UserResponse.model_validate(user),
            message=message,
        )


auth_service = AuthService()
