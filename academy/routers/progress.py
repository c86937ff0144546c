from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_user
from academy.models.user import User
from academy.schemas.progress import CourseProgress, ProgressDashboard
from academy.services.enrollment import EnrollmentService
from academy.services.progress import ProgressService

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.get("/dashboard", response_model=ProgressDashboard)
def get_dashboard(
    course_id: str = Query("all", description="Course id or 'all'"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Progress dashboard for one course, or for every enrolled course when
    `course_id` is `all`.
    """
    return ProgressService(db).get_dashboard(current_user.id, course_id)


@router.get("/courses/{course_id}", response_model=CourseProgress)
def get_course_progress(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProgressService(db).get_course_progress(current_user.id, course_id)


@router.post("/courses/{course_id}/recalculate", response_model=CourseProgress)
def recalculate_course_progress(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Recompute and store the enrollment's progress."""
    EnrollmentService(db).refresh_progress(current_user.id, course_id)
    return ProgressService(db).get_course_progress(current_user.id, course_id)
