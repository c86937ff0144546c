# academy/services/course.py
import math
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from academy.core.decorator import NotFoundException
from academy.models.chapter import Chapter
from academy.models.content_progress import TextLectureProgress, VideoProgress
from academy.models.coupon import Coupon
from academy.models.course import Course
from academy.models.enrollment import Enrollment
from academy.models.live_class import LiveClass
from academy.models.quiz import Quiz, QuizQuestion
from academy.models.quiz_attempt import QuizAttempt
from academy.models.text_lecture import TextLecture
from academy.models.video import Video
from academy.repositories import course as course_repo
from academy.repositories import progress as progress_repo
from academy.schemas.course import (
    ChapterCreate,
    ChapterUpdate,
    CourseCreate,
    CourseUpdate,
    TextLectureCreate,
    VideoCreate,
)


class CourseService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Courses ====================

    def create_course(self, course_in: CourseCreate) -> Course:
        """Create a new course (admin only)"""
        course = Course(**course_in.model_dump())

        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)

        return course

    def get_course(self, course_id: int) -> Course:
        course = course_repo.get_course(self.db, course_id)
        if not course:
            raise NotFoundException("Course not found")
        return course

    def get_courses(
        self,
        page: int = 1,
        size: int = 20,
        search: Optional[str] = None,
        is_published: Optional[bool] = None,
    ) -> Tuple[List[Course], dict]:
        """Get list of courses with pagination and filters"""
        query = self.db.query(Course)

        if is_published is not None:
            query = query.filter(Course.is_published == is_published)

        # Search by title or description
        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Course.title.ilike(search_pattern))
                | (Course.description.ilike(search_pattern))
            )

        total = query.count()

        offset = (page - 1) * size
        courses = (
            query.order_by(Course.created_at.desc(), Course.id.desc())
            .offset(offset)
            .limit(size)
            .all()
        )

        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return courses, pagination

    def get_course_detail(self, course_id: int, user_id: Optional[int] = None) -> dict:
        """Course with its chapters, videos and text lectures in order."""
        course = self.get_course(course_id)

        chapters = []
        total_units = 0
        for chapter in course_repo.list_chapters(self.db, course.id):
            videos = course_repo.list_chapter_videos(self.db, chapter.id)
            lectures = course_repo.list_chapter_text_lectures(self.db, chapter.id)
            total_units += len(videos) + len(lectures)
            chapters.append(
                {
                    "id": chapter.id,
                    "course_id": chapter.course_id,
                    "title": chapter.title,
                    "order": chapter.order,
                    "videos": videos,
                    "text_lectures": lectures,
                }
            )

        is_enrolled = None
        if user_id is not None:
            is_enrolled = (
                progress_repo.get_enrollment(self.db, user_id, course.id) is not None
            )

        return {
            "id": course.id,
            "title": course.title,
            "description": course.description,
            "thumbnail_url": course.thumbnail_url,
            "price": course.price,
            "discount_price": course.discount_price,
            "is_published": course.is_published,
            "created_at": course.created_at,
            "updated_at": course.updated_at,
            "chapters": chapters,
            "total_units": total_units,
            "is_enrolled": is_enrolled,
        }

    def update_course(self, course_id: int, course_in: CourseUpdate) -> Course:
        """Update a course (admin only)"""
        course = self.get_course(course_id)

        for field, value in course_in.model_dump(exclude_unset=True).items():
            setattr(course, field, value)

        self.db.commit()
        self.db.refresh(course)

        return course

    def delete_course(self, course_id: int) -> bool:
        """
        Delete a course and its content.
        Courses with enrollments or coupons attached cannot be deleted.
        """
        course = self.get_course(course_id)

        if self.db.query(Enrollment.id).filter(Enrollment.course_id == course.id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Course has enrollments and cannot be deleted",
            )
        if self.db.query(Coupon.id).filter(Coupon.course_id == course.id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Course has coupons and cannot be deleted",
            )

        quiz_ids = [q.id for q in self.db.query(Quiz.id).filter(Quiz.course_id == course.id)]
        if quiz_ids:
            self.db.query(QuizAttempt).filter(QuizAttempt.quiz_id.in_(quiz_ids)).delete(
                synchronize_session=False
            )
            self.db.query(QuizQuestion).filter(QuizQuestion.quiz_id.in_(quiz_ids)).delete(
                synchronize_session=False
            )
            self.db.query(Quiz).filter(Quiz.id.in_(quiz_ids)).delete(
                synchronize_session=False
            )

        # participants need an enrollment, so these live classes have none
        for model in (
            VideoProgress,
            TextLectureProgress,
            LiveClass,
            Video,
            TextLecture,
            Chapter,
        ):
            self.db.query(model).filter(model.course_id == course.id).delete(
                synchronize_session=False
            )

        self.db.delete(course)
        self.db.commit()

        return True

    # ==================== Chapters ====================

    def create_chapter(self, course_id: int, chapter_in: ChapterCreate) -> Chapter:
        course = self.get_course(course_id)
        chapter = Chapter(course_id=course.id, **chapter_in.model_dump())
        self.db.add(chapter)
        self.db.commit()
        self.db.refresh(chapter)
        return chapter

    def get_chapter(self, chapter_id: int) -> Chapter:
        chapter = course_repo.get_chapter(self.db, chapter_id)
        if not chapter:
            raise NotFoundException("Chapter not found")
        return chapter

    def update_chapter(self, chapter_id: int, chapter_in: ChapterUpdate) -> Chapter:
        chapter = self.get_chapter(chapter_id)
        for field, value in chapter_in.model_dump(exclude_unset=True).items():
            setattr(chapter, field, value)
        self.db.commit()
        self.db.refresh(chapter)
        return chapter

    def delete_chapter(self, chapter_id: int) -> bool:
        chapter = self.get_chapter(chapter_id)

        if self.db.query(Quiz.id).filter(Quiz.chapter_id == chapter.id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Chapter has quizzes and cannot be deleted",
            )

        video_ids = [v.id for v in course_repo.list_chapter_videos(self.db, chapter.id)]
        lecture_ids = [
            t.id for t in course_repo.list_chapter_text_lectures(self.db, chapter.id)
        ]
        if video_ids:
            self.db.query(VideoProgress).filter(
                VideoProgress.video_id.in_(video_ids)
            ).delete(synchronize_session=False)
        if lecture_ids:
            self.db.query(TextLectureProgress).filter(
                TextLectureProgress.text_lecture_id.in_(lecture_ids)
            ).delete(synchronize_session=False)

        self.db.query(Video).filter(Video.chapter_id == chapter.id).delete(
            synchronize_session=False
        )
        self.db.query(TextLecture).filter(TextLecture.chapter_id == chapter.id).delete(
            synchronize_session=False
        )
        self.db.query(LiveClass).filter(LiveClass.chapter_id == chapter.id).update(
            {LiveClass.chapter_id: None}, synchronize_session=False
        )
        self.db.delete(chapter)
        self.db.commit()
        return True

    # ==================== Content Units ====================

    def add_video(self, chapter_id: int, video_in: VideoCreate) -> Video:
        chapter = self.get_chapter(chapter_id)
        video = Video(
            chapter_id=chapter.id, course_id=chapter.course_id, **video_in.model_dump()
        )
        self.db.add(video)
        self.db.commit()
        self.db.refresh(video)
        return video

    def delete_video(self, video_id: int) -> bool:
        video = course_repo.get_video(self.db, video_id)
        if not video:
            raise NotFoundException("Video not found")

        self.db.query(VideoProgress).filter(VideoProgress.video_id == video.id).delete(
            synchronize_session=False
        )
        self.db.delete(video)
        self.db.commit()
        return True

    def add_text_lecture(
        self, chapter_id: int, lecture_in: TextLectureCreate
    ) -> TextLecture:
        chapter = self.get_chapter(chapter_id)
        lecture = TextLecture(
            chapter_id=chapter.id,
            course_id=chapter.course_id,
            **lecture_in.model_dump(),
        )
        self.db.add(lecture)
        self.db.commit()
        self.db.refresh(lecture)
        return lecture

    def delete_text_lecture(self, text_lecture_id: int) -> bool:
        lecture = course_repo.get_text_lecture(self.db, text_lecture_id)
        if not lecture:
            raise NotFoundException("Text lecture not found")

        self.db.query(TextLectureProgress).filter(
            TextLectureProgress.text_lecture_id == lecture.id
        ).delete(synchronize_session=False)
        self.db.delete(lecture)
        self.db.commit()
        return True
