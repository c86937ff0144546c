# academy/services/quiz.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from academy.core.decorator import NotFoundException
from academy.models.quiz import Quiz, QuizQuestion
from academy.models.quiz_attempt import QuizAttempt
from academy.repositories import course as course_repo
from academy.repositories import progress as progress_repo
from academy.schemas.quiz import (
    QuizCreate,
    QuizGradeRequest,
    QuizQuestionCreate,
    QuizSubmitRequest,
)
from academy.services.gamification import GamificationService
from academy.utils.quiz_grading import grade_answers, percentage_of

logger = logging.getLogger(__name__)


class QuizService:
    def __init__(self, db: Session):
        self.db = db
        self.gamification = GamificationService(db)

    # ==================== Admin ====================

    def create_quiz(self, quiz_in: QuizCreate) -> Quiz:
        chapter = course_repo.get_chapter(self.db, quiz_in.chapter_id)
        if not chapter:
            raise NotFoundException("Chapter not found")

        quiz = Quiz(**quiz_in.model_dump(), course_id=chapter.course_id, is_active=True)
        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)
        return quiz

    def add_question(self, quiz_id: int, question_in: QuizQuestionCreate) -> QuizQuestion:
        self.get_quiz(quiz_id)
        question = QuizQuestion(quiz_id=quiz_id, **question_in.model_dump())
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        return question

    def get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundException("Quiz not found")
        return quiz

    def get_questions(self, quiz_id: int) -> List[QuizQuestion]:
        return (
            self.db.query(QuizQuestion)
            .filter(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.order.asc(), QuizQuestion.id.asc())
            .all()
        )

    def list_quizzes(
        self, course_id: Optional[int] = None, chapter_id: Optional[int] = None
    ) -> List[Quiz]:
        query = self.db.query(Quiz)
        if course_id is not None:
            query = query.filter(Quiz.course_id == course_id)
        if chapter_id is not None:
            query = query.filter(Quiz.chapter_id == chapter_id)
        return query.order_by(Quiz.order.asc(), Quiz.id.asc()).all()

    def grade_attempt(self, attempt_id: int, grade_in: QuizGradeRequest) -> QuizAttempt:
        """Grade an assignment submission by hand."""
        attempt = self.db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
        if not attempt:
            raise NotFoundException("Attempt not found")

        if grade_in.score > grade_in.total_points:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Score cannot exceed total points",
            )

        quiz = self.get_quiz(attempt.quiz_id)
        first_pass = not self._has_passed(attempt.user_id, quiz.id)

        attempt.score = grade_in.score
        attempt.total_points = grade_in.total_points
        attempt.percentage = percentage_of(grade_in.score, grade_in.total_points)
        attempt.is_passed = attempt.percentage >= quiz.passing_marks
        attempt.feedback = grade_in.feedback
        attempt.status = "graded"
        attempt.graded_at = datetime.utcnow()

        if attempt.is_passed and first_pass:
            self.gamification.record_quiz_pass(attempt.user_id)

        self.db.commit()
        self.db.refresh(attempt)
        return attempt

    # ==================== Student ====================

    def get_quiz_for_student(self, quiz_id: int, user_id: int) -> dict:
        quiz = self.get_quiz(quiz_id)
        if not quiz.is_active:
            raise NotFoundException("Quiz not found")
        self._require_enrollment(user_id, quiz.course_id)

        questions = self.get_questions(quiz.id)
        return {
            "id": quiz.id,
            "chapter_id": quiz.chapter_id,
            "course_id": quiz.course_id,
            "title": quiz.title,
            "description": quiz.description,
            "type": quiz.type,
            "time_limit": quiz.time_limit,
            "max_attempts": quiz.max_attempts,
            "passing_marks": quiz.passing_marks,
            "is_active": quiz.is_active,
            "order": quiz.order,
            "questions": questions,
            "total_points": sum(q.points or 0 for q in questions),
        }

    def submit_quiz(
        self, quiz_id: int, user_id: int, submission: QuizSubmitRequest
    ) -> dict:
        quiz = self.get_quiz(quiz_id)
        if not quiz.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz is not active",
            )
        self._require_enrollment(user_id, quiz.course_id)

        if quiz.max_attempts is not None:
            attempts_used = (
                self.db.query(func.count(QuizAttempt.id))
                .filter(QuizAttempt.quiz_id == quiz.id, QuizAttempt.user_id == user_id)
                .scalar()
                or 0
            )
            if attempts_used >= quiz.max_attempts:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Maximum attempts reached",
                )

        now = datetime.utcnow()
        attempt = QuizAttempt(
            quiz_id=quiz.id,
            user_id=user_id,
            course_id=quiz.course_id,
            answers=submission.answers,
            submitted_at=now,
        )

        xp = None
        if quiz.type == "assignment":
            attempt.status = "submitted"
            attempt.score = 0
            attempt.total_points = 0
            attempt.percentage = 0
            attempt.is_passed = False
        else:
            first_pass = not self._has_passed(user_id, quiz.id)
            score, total_points, percentage = grade_answers(
                self.get_questions(quiz.id), submission.answers
            )
            attempt.status = "completed"
            attempt.score = score
            attempt.total_points = total_points
            attempt.percentage = percentage
            attempt.is_passed = percentage >= quiz.passing_marks
            attempt.graded_at = now

            if attempt.is_passed and first_pass:
                xp = self.gamification.record_quiz_pass(user_id)

        self.db.add(attempt)
        self.db.commit()
        self.db.refresh(attempt)

        logger.info(
            f"User {user_id} submitted quiz {quiz.id}: "
            f"{attempt.percentage}% ({attempt.status})"
        )
        return {"attempt": attempt, "passed": attempt.is_passed, "xp": xp}

    def get_user_attempts(self, quiz_id: int, user_id: int) -> List[QuizAttempt]:
        return (
            self.db.query(QuizAttempt)
            .filter(QuizAttempt.quiz_id == quiz_id, QuizAttempt.user_id == user_id)
            .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
            .all()
        )

    def _has_passed(self, user_id: int, quiz_id: int) -> bool:
        return (
            self.db.query(QuizAttempt.id)
            .filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id,
                QuizAttempt.is_passed == True,
            )
            .first()
            is not None
        )

    def _require_enrollment(self, user_id: int, course_id: int) -> None:
        if not progress_repo.get_enrollment(self.db, user_id, course_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be enrolled in this course",
            )
