"""
Application initialization module
Creates the default super admin and seeds the default badges.
"""

import logging

from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.hasher import PasswordHelper
from academy.models.admin import Admin
from academy.services.gamification import GamificationService

logger = logging.getLogger(__name__)


def init_super_admin(db: Session) -> None:
    """
    Create a super admin from settings when no admin exists yet.
    """
    try:
        existing_admin = db.query(Admin).first()

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Username: {existing_admin.username})"
            )
            return

        super_admin = Admin(
            name=settings.admin_default_name,
            username="admin",
            email=settings.admin_default_email,
            password=PasswordHelper.hash_password(settings.admin_default_password),
            is_verified=True,
            level=999,
        )

        db.add(super_admin)
        db.commit()
        db.refresh(super_admin)

        logger.info("=" * 60)
        logger.info("🎉 SUPER ADMIN CREATED SUCCESSFULLY!")
        logger.info(f"Username: admin")
        logger.info(f"Email: {settings.admin_default_email}")
        logger.info("=" * 60)
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")

    except Exception as e:
        logger.error(f"❌ Failed to initialize super admin: {e}")
        db.rollback()
        raise


def init_default_badges(db: Session) -> None:
    created = GamificationService(db).initialize_badges()
    logger.info(f"✅ Default badges ready ({created} created)")


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    init_super_admin(db)
    init_default_badges(db)

    logger.info("✅ Application initialization completed!")
