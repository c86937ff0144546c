# academy/routers/quiz.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.quiz import (
    QuizAttemptResponse,
    QuizCreate,
    QuizDetailResponse,
    QuizGradeRequest,
    QuizQuestionCreate,
    QuizQuestionResponse,
    QuizResponse,
    QuizSubmitRequest,
    QuizSubmitResponse,
)
from academy.services.quiz import QuizService

router = APIRouter(
    prefix="/quizzes",
    tags=["Quizzes"],
    responses={404: {"description": "Not found"}},
)


# ==================== Admin Endpoints ====================


@router.post("/", response_model=QuizResponse, status_code=201)
def create_quiz(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return QuizService(db).create_quiz(quiz_in)


@router.get("/", response_model=List[QuizResponse])
def list_quizzes(
    course_id: Optional[int] = Query(None),
    chapter_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return QuizService(db).list_quizzes(course_id=course_id, chapter_id=chapter_id)


@router.post(
    "/{quiz_id}/questions", response_model=QuizQuestionResponse, status_code=201
)
def add_question(
    quiz_id: int,
    question_in: QuizQuestionCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    return QuizService(db).add_question(quiz_id, question_in)


@router.get("/{quiz_id}/questions", response_model=List[QuizQuestionResponse])
def list_questions_with_answers(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = QuizService(db)
    service.get_quiz(quiz_id)
    return service.get_questions(quiz_id)


@router.post("/attempts/{attempt_id}/grade", response_model=QuizAttemptResponse)
def grade_attempt(
    attempt_id: int,
    grade_in: QuizGradeRequest,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Grade an assignment submission."""
    return QuizService(db).grade_attempt(attempt_id, grade_in)


# ==================== Student Endpoints ====================


@router.get("/{quiz_id}", response_model=QuizDetailResponse)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Quiz with its questions; correct answers are not included."""
    return QuizService(db).get_quiz_for_student(quiz_id, current_user.id)


@router.post("/{quiz_id}/submit", response_model=QuizSubmitResponse)
def submit_quiz(
    quiz_id: int,
    submission: QuizSubmitRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return QuizService(db).submit_quiz(quiz_id, current_user.id, submission)


@router.get("/{quiz_id}/attempts", response_model=List[QuizAttemptResponse])
def get_my_attempts(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return QuizService(db).get_user_attempts(quiz_id, current_user.id)
