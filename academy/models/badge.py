# academy/models/badge.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from academy.core.database import Base


class Badge(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String(50), default="🏆", nullable=False)
    # achievement, streak, milestone, special
    category = Column(String(20), default="achievement", nullable=False)

    # videos_completed, quizzes_passed, courses_completed, streak, level, xp
    requirement_type = Column(String(30), nullable=False)
    requirement_value = Column(Integer, nullable=False)

    xp_reward = Column(Integer, default=50, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    badge_id = Column(Integer, ForeignKey("badges.id"), nullable=False)
    earned_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
