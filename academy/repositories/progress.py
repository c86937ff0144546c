# academy/repositories/progress.py
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.chapter import Chapter
from academy.models.content_progress import TextLectureProgress, VideoProgress
from academy.models.enrollment import Enrollment
from academy.models.text_lecture import TextLecture
from academy.models.video import Video
from academy.utils.progress import content_key


@db_exception
def get_enrollment(db: Session, user_id: int, course_id: int) -> Optional[Enrollment]:
    return (
        db.query(Enrollment)
        .filter(
            and_(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        )
        .first()
    )


@db_exception
def list_user_enrollments(db: Session, user_id: int) -> List[Enrollment]:
    return db.query(Enrollment).filter(Enrollment.user_id == user_id).all()


@db_exception
def count_completed_videos(db: Session, user_id: int, course_id: int) -> int:
    # joined to the content tables so deleted units stop counting
    return (
        db.query(func.count(VideoProgress.id))
        .join(Video, Video.id == VideoProgress.video_id)
        .join(Chapter, Chapter.id == Video.chapter_id)
        .filter(
            VideoProgress.user_id == user_id,
            VideoProgress.completed == True,
            Chapter.course_id == course_id,
        )
        .scalar()
        or 0
    )


@db_exception
def count_completed_text_lectures(db: Session, user_id: int, course_id: int) -> int:
    return (
        db.query(func.count(TextLectureProgress.id))
        .join(TextLecture, TextLecture.id == TextLectureProgress.text_lecture_id)
        .join(Chapter, Chapter.id == TextLecture.chapter_id)
        .filter(
            TextLectureProgress.user_id == user_id,
            TextLectureProgress.completed == True,
            Chapter.course_id == course_id,
        )
        .scalar()
        or 0
    )


@db_exception
def get_video_progress(
    db: Session, user_id: int, video_id: int
) -> Optional[VideoProgress]:
    return (
        db.query(VideoProgress)
        .filter(
            VideoProgress.user_id == user_id,
            VideoProgress.video_id == video_id,
        )
        .first()
    )


@db_exception
def get_text_lecture_progress(
    db: Session, user_id: int, text_lecture_id: int
) -> Optional[TextLectureProgress]:
    return (
        db.query(TextLectureProgress)
        .filter(
            TextLectureProgress.user_id == user_id,
            TextLectureProgress.text_lecture_id == text_lecture_id,
        )
        .first()
    )


@db_exception
def list_completed_unit_keys(db: Session, user_id: int, course_id: int) -> List[str]:
    video_ids = (
        db.query(VideoProgress.video_id)
        .join(Video, Video.id == VideoProgress.video_id)
        .join(Chapter, Chapter.id == Video.chapter_id)
        .filter(
            VideoProgress.user_id == user_id,
            VideoProgress.completed == True,
            Chapter.course_id == course_id,
        )
        .order_by(VideoProgress.video_id)
        .all()
    )
    lecture_ids = (
        db.query(TextLectureProgress.text_lecture_id)
        .join(TextLecture, TextLecture.id == TextLectureProgress.text_lecture_id)
        .join(Chapter, Chapter.id == TextLecture.chapter_id)
        .filter(
            TextLectureProgress.user_id == user_id,
            TextLectureProgress.completed == True,
            Chapter.course_id == course_id,
        )
        .order_by(TextLectureProgress.text_lecture_id)
        .all()
    )
    return [content_key("video", row[0]) for row in video_ids] + [
        content_key("text_lecture", row[0]) for row in lecture_ids
    ]
