# academy/services/progress.py
"""
Course progress calculation and the student progress dashboard.
"""

import logging
from typing import List, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from academy.core.decorator import NotFoundException, db_exception
from academy.models.quiz import Quiz
from academy.models.quiz_attempt import QuizAttempt
from academy.repositories import course as course_repo
from academy.repositories import gamification as gamification_repo
from academy.repositories import progress as progress_repo
from academy.utils.progress import progress_percentage

logger = logging.getLogger(__name__)


def count_course_units(db: Session, course_id: int) -> int:
    return course_repo.count_course_videos(
        db, course_id
    ) + course_repo.count_course_text_lectures(db, course_id)


def count_completed_units(db: Session, user_id: int, course_id: int) -> int:
    return progress_repo.count_completed_videos(
        db, user_id, course_id
    ) + progress_repo.count_completed_text_lectures(db, user_id, course_id)


def compute_progress(db: Session, user_id: int, course_id: int) -> int:
    """
    Percentage (0-100) of the course's videos and text lectures the user
    has completed.

    Raises NotFoundException when the course does not exist and
    DataUnavailableException when a count query fails.
    """
    course = course_repo.get_course(db, course_id)
    if not course:
        raise NotFoundException("Course not found")

    total = count_course_units(db, course_id)
    if total == 0:
        return 0

    completed = count_completed_units(db, user_id, course_id)
    return progress_percentage(completed, total)


class ProgressService:
    def __init__(self, db: Session):
        self.db = db

    def get_course_progress(self, user_id: int, course_id: int) -> dict:
        enrollment = progress_repo.get_enrollment(self.db, user_id, course_id)
        if not enrollment:
            raise NotFoundException("Enrollment not found")

        total = count_course_units(self.db, course_id)
        completed = count_completed_units(self.db, user_id, course_id)
        return {
            "course_id": course_id,
            "progress": compute_progress(self.db, user_id, course_id),
            "total_units": total,
            "completed_units": min(completed, total),
        }

    @db_exception
    def get_dashboard(self, user_id: int, course_id: Union[int, str] = "all") -> dict:
        """
        Summary of lectures, quizzes and assignments for one course or for
        every course the user is enrolled in (``course_id="all"``).
        """
        if course_id == "all":
            enrollments = progress_repo.list_user_enrollments(self.db, user_id)
            course_title = "All Courses"
        else:
            try:
                course_id = int(course_id)
            except (TypeError, ValueError):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="course_id must be a number or 'all'",
                )
            course = course_repo.get_course(self.db, course_id)
            if not course:
                raise NotFoundException("Course not found")
            enrollment = progress_repo.get_enrollment(self.db, user_id, course_id)
            enrollments = [enrollment] if enrollment else []
            course_title = course.title

        user_xp = gamification_repo.get_user_xp(self.db, user_id)
        summary = {
            "user_id": user_id,
            "course_id": course_id,
            "course_title": course_title,
            "current_streak": user_xp.current_streak if user_xp else 0,
        }

        if not enrollments:
            return {
                "summary": summary,
                "lecture_chart": {"completed": 0, "remaining": 0},
                "quiz_performance": [],
            }

        course_ids = [e.course_id for e in enrollments]

        total_lectures = sum(count_course_units(self.db, cid) for cid in course_ids)
        completed_lectures = sum(
            count_completed_units(self.db, user_id, cid) for cid in course_ids
        )
        completed_lectures = min(completed_lectures, total_lectures)

        quizzes = self.db.query(Quiz).filter(
            Quiz.course_id.in_(course_ids), Quiz.is_active == True
        ).all()
        quiz_ids = {q.id for q in quizzes if q.type == "quiz"}
        assignment_ids = {q.id for q in quizzes if q.type == "assignment"}
        titles = {q.id: q.title for q in quizzes}

        attempts: List[QuizAttempt] = (
            self.db.query(QuizAttempt)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.course_id.in_(course_ids),
            )
            .order_by(QuizAttempt.submitted_at.asc(), QuizAttempt.id.asc())
            .all()
        )
        quiz_attempts = [a for a in attempts if a.quiz_id in quiz_ids]
        assignment_attempts = [a for a in attempts if a.quiz_id in assignment_ids]
        graded_assignments = [a for a in assignment_attempts if a.status == "graded"]

        overall = progress_percentage(
            sum(e.progress or 0 for e in enrollments), 100 * len(enrollments)
        )
        last_activity = max(
            (e.last_accessed_at for e in enrollments if e.last_accessed_at),
            default=None,
        )

        summary.update(
            total_lectures=total_lectures,
            completed_lectures=completed_lectures,
            lecture_completion_percentage=progress_percentage(
                completed_lectures, total_lectures
            ),
            total_assignments=len(assignment_ids),
            submitted_assignments=len({a.quiz_id for a in assignment_attempts}),
            average_assignment_score=_average(graded_assignments),
            total_quizzes=len(quiz_ids),
            completed_quizzes=len({a.quiz_id for a in quiz_attempts}),
            passed_quizzes=len({a.quiz_id for a in quiz_attempts if a.is_passed}),
            average_quiz_score=_average(quiz_attempts),
            overall_completion_percentage=overall,
            last_activity_date=last_activity,
        )

        quiz_performance = [
            {
                "attempt": f"Attempt {index + 1}",
                "score": attempt.percentage,
                "date": attempt.submitted_at,
                "quiz_title": titles.get(attempt.quiz_id, ""),
            }
            for index, attempt in enumerate(quiz_attempts[-10:])
        ]

        return {
            "summary": summary,
            "lecture_chart": {
                "completed": completed_lectures,
                "remaining": total_lectures - completed_lectures,
            },
            "quiz_performance": quiz_performance,
        }


def _average(attempts: List[QuizAttempt]) -> int:
    if not attempts:
        return 0
    return progress_percentage(sum(a.percentage or 0 for a in attempts), 100 * len(attempts))
