# academy/routers/course.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_optional_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.course import (
    ChapterCreate,
    ChapterResponse,
    ChapterUpdate,
    CourseCreate,
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    CourseUpdate,
    TextLectureCreate,
    TextLectureResponse,
    VideoCreate,
    VideoResponse,
)
from academy.services.course import CourseService

router = APIRouter(
    prefix="/courses",
    tags=["Courses"],
    responses={404: {"description": "Not found"}},
)


# ==================== Course Endpoints ====================


@router.post("/", response_model=CourseResponse, status_code=201)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """
    Create a new course.
    Only admins can create courses.
    """
    service = CourseService(db)
    return service.create_course(course_in)


@router.get("/", response_model=CourseListResponse)
def list_courses(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by title or description"),
    db: Session = Depends(get_db),
):
    """
    Get published courses with pagination.
    Available to all users (authenticated or not).
    """
    service = CourseService(db)
    courses, pagination = service.get_courses(
        page=page, size=size, search=search, is_published=True
    )
    return {"courses": courses, **pagination}


@router.get("/admin/all", response_model=CourseListResponse)
def list_all_courses(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    is_published: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Every course including unpublished ones (admin only)."""
    service = CourseService(db)
    courses, pagination = service.get_courses(
        page=page, size=size, search=search, is_published=is_published
    )
    return {"courses": courses, **pagination}


@router.get("/{course_id}", response_model=CourseDetailResponse)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Course detail with chapters, videos and text lectures.
    `is_enrolled` is filled in for authenticated students.
    """
    service = CourseService(db)
    return service.get_course_detail(
        course_id, user_id=current_user.id if current_user else None
    )


@router.patch("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    return service.update_course(course_id, course_in)


@router.delete("/{course_id}")
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    service.delete_course(course_id)
    return {"success": True, "message": "Course deleted successfully"}


# ==================== Chapter Endpoints ====================


@router.post("/{course_id}/chapters", response_model=ChapterResponse, status_code=201)
def create_chapter(
    course_id: int,
    chapter_in: ChapterCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    return service.create_chapter(course_id, chapter_in)


@router.patch("/chapters/{chapter_id}", response_model=ChapterResponse)
def update_chapter(
    chapter_id: int,
    chapter_in: ChapterUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    return service.update_chapter(chapter_id, chapter_in)


@router.delete("/chapters/{chapter_id}")
def delete_chapter(
    chapter_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    service.delete_chapter(chapter_id)
    return {"success": True, "message": "Chapter deleted successfully"}


# ==================== Content Endpoints ====================


@router.post(
    "/chapters/{chapter_id}/videos", response_model=VideoResponse, status_code=201
)
def add_video(
    chapter_id: int,
    video_in: VideoCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    return service.add_video(chapter_id, video_in)


@router.delete("/videos/{video_id}")
def delete_video(
    video_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    service.delete_video(video_id)
    return {"success": True, "message": "Video deleted successfully"}


@router.post(
    "/chapters/{chapter_id}/text-lectures",
    response_model=TextLectureResponse,
    status_code=201,
)
def add_text_lecture(
    chapter_id: int,
    lecture_in: TextLectureCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    return service.add_text_lecture(chapter_id, lecture_in)


@router.delete("/text-lectures/{text_lecture_id}")
def delete_text_lecture(
    text_lecture_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    service = CourseService(db)
    service.delete_text_lecture(text_lecture_id)
    return {"success": True, "message": "Text lecture deleted successfully"}
