# academy/core/security.py
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, status
from jose import JWTError, jwt

from academy.core.config import settings
from academy.models.admin import Admin
from academy.models.user import User

logger = logging.getLogger(__name__)


class JWTManager:
    """JWT token management for students and admins"""

    def __init__(self):
        self.secret_key = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.user_token_expire = timedelta(days=settings.jwt_user_expiration)
        self.refresh_token_expire = timedelta(days=settings.jwt_refresh_expiration)
        self.admin_token_expire = timedelta(days=settings.jwt_admin_expiration)
        self.issuer = settings.jwt_issuer

    def _encode(self, payload: Dict[str, Any]) -> str:
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_access_token(
        self,
        user: User,
        remember_me: bool = False,
        login_time: Optional[datetime] = None,
    ) -> str:
        """
        Create JWT access token for a student

        Args:
            user: User model instance
            remember_me: Extend token lifetime if True
            login_time: Issue time, defaults to now
        """
        issued_at = login_time or datetime.utcnow()
        if remember_me:
            expire = issued_at + timedelta(days=30)
        else:
            expire = issued_at + self.user_token_expire

        payload = {
            "sub": str(user.id),
            "user_id": user.id,
            "role": "student",
            "email": user.email,
            "exp": int(expire.timestamp()),
            "iat": int(issued_at.timestamp()),
            "iss": self.issuer,
            "type": "access",
        }

        token = self._encode(payload)
        logger.info(f"Access token created for user: {user.id}")
        return token

    def create_refresh_token(self, user: User, remember_me: bool = False) -> str:
        current_time = datetime.utcnow()
        if remember_me:
            expire = current_time + timedelta(days=90)
        else:
            expire = current_time + self.refresh_token_expire

        payload = {
            "sub": str(user.id),
            "user_id": user.id,
            "exp": int(expire.timestamp()),
            "iat": int(current_time.timestamp()),
            "iss": self.issuer,
            "type": "refresh",
        }
        return self._encode(payload)

    def create_token_pair(
        self, user: User, remember_me: bool = False, login_time: datetime = None
    ) -> Tuple[str, str]:
        """Create both access and refresh tokens"""
        access_token = self.create_access_token(
            user=user, remember_me=remember_me, login_time=login_time
        )
        refresh_token = self.create_refresh_token(user, remember_me)
        return access_token, refresh_token

    def create_admin_token(self, admin: Admin) -> str:
        login_time = datetime.utcnow()
        expire = login_time + self.admin_token_expire
        payload = {
            "sub": str(admin.id),
            "admin_id": admin.id,
            "username": admin.username,
            "email": admin.email,
            "role": "admin",
            "level": admin.level,
            "type": "access",
            "iat": int(login_time.timestamp()),
            "exp": int(expire.timestamp()),
            "iss": self.issuer,
        }
        token = self._encode(payload)
        logger.info(f"Access token created for admin: {admin.username}")
        return token

    def verify_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Verify and decode JWT token
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": True},
            )
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if payload.get("type") != token_type:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid token type. Expected {token_type}",
            )

        if payload.get("iss") != self.issuer:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token issuer",
            )

        return payload


jwt_manager = JWTManager()
