# academy/services/enrollment.py
import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.decorator import NotFoundException
from academy.models.content_progress import TextLectureProgress, VideoProgress
from academy.models.course import Course
from academy.models.enrollment import Enrollment
from academy.repositories import course as course_repo
from academy.repositories import progress as progress_repo
from academy.schemas.enrollment import EnrollmentCreate
from academy.services.coupon import CouponService
from academy.services.gamification import GamificationService
from academy.services.progress import compute_progress
from academy.utils.progress import watch_percentage

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(self, db: Session):
        self.db = db
        self.coupons = CouponService(db)
        self.gamification = GamificationService(db)

    # ==================== Enrollment ====================

    def enroll_user(self, user_id: int, enrollment_in: EnrollmentCreate) -> Enrollment:
        """
        Enroll a user in a course.
        - Free or discounted courses use the course's effective price
        - A coupon is quoted first and redeemed in the same transaction
        """
        course = course_repo.get_course(self.db, enrollment_in.course_id)
        if not course:
            raise NotFoundException("Course not found")

        if progress_repo.get_enrollment(self.db, user_id, course.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Already enrolled in this course",
            )

        quote = None
        amount_paid = course.effective_price or 0
        if enrollment_in.coupon_code:
            validity, quote = self.coupons.quote(
                enrollment_in.coupon_code, course.id, user_id
            )
            if not validity.valid:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail=validity.reason
                )
            amount_paid = quote.final_price

        enrollment = Enrollment(
            user_id=user_id,
            course_id=course.id,
            progress=0,
            completed_lessons=[],
            amount_paid=amount_paid,
            payment_reference=enrollment_in.payment_reference,
            coupon_id=quote.coupon_id if quote else None,
            enrolled_at=datetime.utcnow(),
        )
        self.db.add(enrollment)

        try:
            self.db.flush()
            if quote:
                self.coupons.redeem(quote, user_id, enrollment.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(enrollment)
        logger.info(f"User {user_id} enrolled in course {course.id}")
        return enrollment

    def get_user_enrollments(
        self, user_id: int, page: int = 1, size: int = 20
    ) -> Tuple[List[dict], dict]:
        query = (
            self.db.query(Enrollment, Course.title)
            .join(Course, Course.id == Enrollment.course_id)
            .filter(Enrollment.user_id == user_id)
        )

        total = query.count()

        offset = (page - 1) * size
        rows = (
            query.order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
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

        return [self._to_dict(e, title) for e, title in rows], pagination

    def get_enrollment(self, user_id: int, course_id: int) -> dict:
        enrollment = self._require_enrollment(user_id, course_id)
        course = course_repo.get_course(self.db, course_id)
        return self._to_dict(enrollment, course.title if course else None)

    # ==================== Completion Events ====================

    def update_video_progress(
        self,
        user_id: int,
        course_id: int,
        video_id: int,
        watch_time: float,
        duration: float,
    ) -> dict:
        """
        Store watch position; the video counts as complete once the user has
        watched the configured share of it. A completed video stays complete.
        """
        enrollment = self._require_enrollment(user_id, course_id)
        video = course_repo.get_video(self.db, video_id)
        if not video or video.course_id != course_id:
            raise NotFoundException("Video not found")

        record = progress_repo.get_video_progress(self.db, user_id, video_id)
        if not record:
            record = VideoProgress(
                user_id=user_id,
                video_id=video_id,
                course_id=course_id,
                watch_time=0,
                duration=0,
                completed=False,
            )
            self.db.add(record)

        watched = max(record.watch_time or 0, watch_time)
        length = duration or record.duration
        record.watch_time = int(watched)
        record.duration = int(length)

        newly_completed = False
        reached = (
            watch_percentage(watched, length) >= settings.video_completion_threshold
        )
        if reached and not record.completed:
            record.completed = True
            record.completed_at = datetime.utcnow()
            newly_completed = True

        self.db.flush()
        return self._finish_event(enrollment, record.completed, newly_completed)

    def mark_content_complete(
        self, user_id: int, course_id: int, content_type: str, content_id: int
    ) -> dict:
        enrollment = self._require_enrollment(user_id, course_id)

        newly_completed_video = False
        if content_type == "video":
            video = course_repo.get_video(self.db, content_id)
            if not video or video.course_id != course_id:
                raise NotFoundException("Video not found")

            record = progress_repo.get_video_progress(self.db, user_id, content_id)
            if not record:
                record = VideoProgress(
                    user_id=user_id,
                    video_id=content_id,
                    course_id=course_id,
                    watch_time=0,
                    duration=video.duration or 0,
                    completed=False,
                )
                self.db.add(record)
            if not record.completed:
                record.completed = True
                record.completed_at = datetime.utcnow()
                newly_completed_video = True

        elif content_type == "text_lecture":
            lecture = course_repo.get_text_lecture(self.db, content_id)
            if not lecture or lecture.course_id != course_id:
                raise NotFoundException("Text lecture not found")

            record = progress_repo.get_text_lecture_progress(
                self.db, user_id, content_id
            )
            if not record:
                record = TextLectureProgress(
                    user_id=user_id,
                    text_lecture_id=content_id,
                    course_id=course_id,
                    completed=False,
                )
                self.db.add(record)
            if not record.completed:
                record.completed = True
                record.completed_at = datetime.utcnow()

        else:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="content_type must be 'video' or 'text_lecture'",
            )

        self.db.flush()
        return self._finish_event(enrollment, True, newly_completed_video)

    def refresh_progress(self, user_id: int, course_id: int) -> Enrollment:
        """Recompute and store progress without a completion event."""
        enrollment = self._require_enrollment(user_id, course_id)
        self._sync_enrollment(enrollment)
        self.db.commit()
        self.db.refresh(enrollment)
        return enrollment

    def _finish_event(
        self, enrollment: Enrollment, unit_completed: bool, newly_completed_video: bool
    ) -> dict:
        xp = {}
        if newly_completed_video:
            xp["video_complete"] = self.gamification.record_video_complete(
                enrollment.user_id
            )

        course_completed = self._sync_enrollment(enrollment)
        if course_completed:
            xp["course_complete"] = self.gamification.record_course_complete(
                enrollment.user_id
            )

        self.db.commit()

        return {
            "success": True,
            "course_id": enrollment.course_id,
            "progress": enrollment.progress,
            "completed": unit_completed,
            "course_completed": course_completed,
            "xp": xp or None,
        }

    def _sync_enrollment(self, enrollment: Enrollment) -> bool:
        """
        Write the recomputed progress onto the enrollment.
        Returns True the first time the course reaches 100%. completed_at is
        kept when content added later lowers progress again.
        """
        progress = compute_progress(self.db, enrollment.user_id, enrollment.course_id)
        enrollment.progress = progress
        enrollment.completed_lessons = progress_repo.list_completed_unit_keys(
            self.db, enrollment.user_id, enrollment.course_id
        )
        enrollment.last_accessed_at = datetime.utcnow()

        if progress >= 100 and enrollment.completed_at is None:
            enrollment.completed_at = datetime.utcnow()
            logger.info(
                f"User {enrollment.user_id} completed course {enrollment.course_id}"
            )
            return True
        return False

    def _require_enrollment(self, user_id: int, course_id: int) -> Enrollment:
        enrollment = progress_repo.get_enrollment(self.db, user_id, course_id)
        if not enrollment:
            raise NotFoundException("Enrollment not found")
        return enrollment

    @staticmethod
    def _to_dict(enrollment: Enrollment, course_title: Optional[str]) -> dict:
        return {
            "id": enrollment.id,
            "user_id": enrollment.user_id,
            "course_id": enrollment.course_id,
            "progress": enrollment.progress,
            "completed_lessons": enrollment.completed_lessons or [],
            "amount_paid": enrollment.amount_paid,
            "coupon_id": enrollment.coupon_id,
            "enrolled_at": enrollment.enrolled_at,
            "last_accessed_at": enrollment.last_accessed_at,
            "completed_at": enrollment.completed_at,
            "course_title": course_title,
        }
