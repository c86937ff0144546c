# academy/repositories/course.py
"""
Course structure queries.

Courses, chapters and content units are linked only through foreign-key
columns, so each relationship is resolved by one function here.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.chapter import Chapter
from academy.models.course import Course
from academy.models.text_lecture import TextLecture
from academy.models.video import Video


@db_exception
def get_course(db: Session, course_id: int) -> Optional[Course]:
    return db.query(Course).filter(Course.id == course_id).first()


@db_exception
def get_chapter(db: Session, chapter_id: int) -> Optional[Chapter]:
    return db.query(Chapter).filter(Chapter.id == chapter_id).first()


@db_exception
def list_chapters(db: Session, course_id: int) -> List[Chapter]:
    return (
        db.query(Chapter)
        .filter(Chapter.course_id == course_id)
        .order_by(Chapter.order.asc(), Chapter.id.asc())
        .all()
    )


@db_exception
def list_chapter_videos(db: Session, chapter_id: int) -> List[Video]:
    return (
        db.query(Video)
        .filter(Video.chapter_id == chapter_id)
        .order_by(Video.order.asc(), Video.id.asc())
        .all()
    )


@db_exception
def list_chapter_text_lectures(db: Session, chapter_id: int) -> List[TextLecture]:
    return (
        db.query(TextLecture)
        .filter(TextLecture.chapter_id == chapter_id)
        .order_by(TextLecture.order.asc(), TextLecture.id.asc())
        .all()
    )


@db_exception
def get_video(db: Session, video_id: int) -> Optional[Video]:
    return db.query(Video).filter(Video.id == video_id).first()


@db_exception
def get_text_lecture(db: Session, text_lecture_id: int) -> Optional[TextLecture]:
    return db.query(TextLecture).filter(TextLecture.id == text_lecture_id).first()


@db_exception
def count_course_videos(db: Session, course_id: int) -> int:
    return (
        db.query(func.count(Video.id))
        .join(Chapter, Chapter.id == Video.chapter_id)
        .filter(Chapter.course_id == course_id)
        .scalar()
        or 0
    )


@db_exception
def count_course_text_lectures(db: Session, course_id: int) -> int:
    return (
        db.query(func.count(TextLecture.id))
        .join(Chapter, Chapter.id == TextLecture.chapter_id)
        .filter(Chapter.course_id == course_id)
        .scalar()
        or 0
    )
