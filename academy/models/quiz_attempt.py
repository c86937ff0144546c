# academy/models/quiz_attempt.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from academy.core.database import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)

    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # {"<question_id>": ["answer", ...]}
    answers = Column(JSON, nullable=True)

    score = Column(Integer, default=0, nullable=False)
    total_points = Column(Integer, default=0, nullable=False)
    percentage = Column(Integer, default=0, nullable=False)
    is_passed = Column(Boolean, default=False, nullable=False)

    # completed (auto-graded quiz), submitted (assignment), graded
    status = Column(String(20), default="completed", nullable=False)
    feedback = Column(Text, nullable=True)

    started_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score})>"
