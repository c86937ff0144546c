# academy/models/user_xp.py
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from academy.core.database import Base


class UserXP(Base):
    """
    Gamification totals for a user.
    Created lazily on the first XP-earning event and only mutated additively.
    """

    __tablename__ = "user_xp"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True
    )

    total_xp = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)

    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(Date, nullable=True)

    videos_completed = Column(Integer, default=0, nullable=False)
    quizzes_passed = Column(Integer, default=0, nullable=False)
    courses_completed = Column(Integer, default=0, nullable=False)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<UserXP(user_id={self.user_id}, total_xp={self.total_xp}, level={self.level})>"
