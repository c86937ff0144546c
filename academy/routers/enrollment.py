# academy/routers/enrollment.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_user
from academy.models.user import User
from academy.schemas.enrollment import (
    ContentCompleteRequest,
    EnrollmentCreate,
    EnrollmentListResponse,
    EnrollmentResponse,
    ProgressUpdateResponse,
    VideoProgressUpdate,
)
from academy.services.enrollment import EnrollmentService

router = APIRouter(
    prefix="/enrollments",
    tags=["Enrollments"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=EnrollmentResponse, status_code=201)
def enroll_in_course(
    enrollment_in: EnrollmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Enroll the current user in a course.
    An optional `coupon_code` is validated and redeemed with the enrollment.
    """
    service = EnrollmentService(db)
    enrollment = service.enroll_user(current_user.id, enrollment_in)
    return service.get_enrollment(current_user.id, enrollment.course_id)


@router.get("/", response_model=EnrollmentListResponse)
def list_my_enrollments(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = EnrollmentService(db)
    enrollments, pagination = service.get_user_enrollments(
        current_user.id, page=page, size=size
    )
    return {"enrollments": enrollments, **pagination}


@router.get("/{course_id}", response_model=EnrollmentResponse)
def get_my_enrollment(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = EnrollmentService(db)
    return service.get_enrollment(current_user.id, course_id)


# ==================== Completion Events ====================


@router.post("/{course_id}/video-progress", response_model=ProgressUpdateResponse)
def update_video_progress(
    course_id: int,
    progress_in: VideoProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Report the watch position of a video.
    The video is marked complete once enough of it has been watched.
    """
    service = EnrollmentService(db)
    return service.update_video_progress(
        current_user.id,
        course_id,
        progress_in.video_id,
        progress_in.watch_time,
        progress_in.duration,
    )


@router.post("/{course_id}/complete", response_model=ProgressUpdateResponse)
def mark_content_complete(
    course_id: int,
    content_in: ContentCompleteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = EnrollmentService(db)
    return service.mark_content_complete(
        current_user.id, course_id, content_in.content_type, content_in.content_id
    )
