# academy/models/quiz.py
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


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)

    chapter_id = Column(Integer, ForeignKey("chapters.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # 'quiz' is auto-graded, 'assignment' is graded by an admin
    type = Column(String(20), default="quiz", nullable=False)

    time_limit = Column(Integer, nullable=True)  # minutes
    max_attempts = Column(Integer, nullable=True)  # null = unlimited
    passing_marks = Column(Integer, default=50, nullable=False)  # percentage

    is_active = Column(Boolean, default=True, nullable=False)
    order = Column(Integer, default=1, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, title='{self.title}', type='{self.type}')>"


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)

    question = Column(Text, nullable=False)
    # single_correct, multiple_correct, true_false
    question_type = Column(String(30), default="single_correct", nullable=False)
    points = Column(Integer, default=1, nullable=False)

    # ["option a", "option b", ...]
    options = Column(JSON, nullable=False, default=list)
    # Subset of options
    correct_answers = Column(JSON, nullable=False, default=list)

    order = Column(Integer, default=0, nullable=False)
