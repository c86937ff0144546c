# academy/services/live_class.py
import logging
from datetime import datetime
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.decorator import NotFoundException
from academy.models.live_class import LiveClass, LiveClassParticipant
from academy.models.user import User
from academy.repositories import course as course_repo
from academy.repositories import progress as progress_repo
from academy.schemas.live_class import LiveClassCreate, LiveClassUpdate
from academy.utils.live_class import (
    join_blocked_reason,
    meeting_url,
    new_room_name,
    to_naive_utc,
)

logger = logging.getLogger(__name__)


class LiveClassService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Admin ====================

    def schedule(self, admin_id: int, class_in: LiveClassCreate) -> LiveClass:
        """
        Schedule a live class for a course.
        - The chapter, when given, must belong to the course
        - A unique meeting room is generated for the class
        """
        if not course_repo.get_course(self.db, class_in.course_id):
            raise NotFoundException("Course not found")

        if class_in.chapter_id is not None:
            chapter = course_repo.get_chapter(self.db, class_in.chapter_id)
            if not chapter or chapter.course_id != class_in.course_id:
                raise NotFoundException("Chapter not found")

        data = class_in.model_dump()
        data["scheduled_at"] = to_naive_utc(class_in.scheduled_at)
        live_class = LiveClass(
            **data,
            created_by=admin_id,
            room_name=new_room_name(class_in.course_id),
            status="scheduled",
        )
        self.db.add(live_class)
        self.db.commit()
        self.db.refresh(live_class)
        logger.info(
            f"Live class {live_class.id} scheduled for course {live_class.course_id}"
        )
        return live_class

    def get_live_class(self, live_class_id: int) -> LiveClass:
        live_class = self.db.get(LiveClass, live_class_id)
        if not live_class:
            raise NotFoundException("Live class not found")
        return live_class

    def update(self, live_class_id: int, class_in: LiveClassUpdate) -> LiveClass:
        live_class = self.get_live_class(live_class_id)
        if live_class.status != "scheduled":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot update a {live_class.status} live class",
            )

        for field, value in class_in.model_dump(exclude_unset=True).items():
            if field == "scheduled_at" and value is not None:
                value = to_naive_utc(value)
            setattr(live_class, field, value)

        self.db.commit()
        self.db.refresh(live_class)
        return live_class

    def start(self, live_class_id: int) -> LiveClass:
        return self._transition(live_class_id, "scheduled", "live", "started_at")

    def end(self, live_class_id: int) -> LiveClass:
        return self._transition(live_class_id, "live", "ended", "ended_at")

    def cancel(self, live_class_id: int) -> LiveClass:
        return self._transition(live_class_id, "scheduled", "cancelled", None)

    def delete(self, live_class_id: int) -> bool:
        live_class = self.get_live_class(live_class_id)
        if live_class.status == "live":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a live class while it is running",
            )

        self.db.query(LiveClassParticipant).filter(
            LiveClassParticipant.live_class_id == live_class.id
        ).delete(synchronize_session=False)
        self.db.delete(live_class)
        self.db.commit()
        logger.info(f"Live class {live_class_id} deleted")
        return True

    def get_participants(self, live_class_id: int) -> List[LiveClassParticipant]:
        self.get_live_class(live_class_id)
        return (
            self.db.query(LiveClassParticipant)
            .filter(LiveClassParticipant.live_class_id == live_class_id)
            .order_by(LiveClassParticipant.joined_at.asc())
            .all()
        )

    def list_for_course(self, course_id: int, upcoming_only: bool = False) -> List[LiveClass]:
        query = self.db.query(LiveClass).filter(LiveClass.course_id == course_id)
        if upcoming_only:
            query = query.filter(LiveClass.status.in_(["scheduled", "live"]))
        return query.order_by(LiveClass.scheduled_at.asc(), LiveClass.id.asc()).all()

    def admin_join(self, live_class_id: int, admin_name: str) -> dict:
        live_class = self.get_live_class(live_class_id)
        return self._join_config(live_class, admin_name, "moderator")

    # ==================== Student ====================

    def list_for_student(
        self, user_id: int, course_id: int, upcoming_only: bool = False
    ) -> List[LiveClass]:
        self._require_enrollment(user_id, course_id)
        return self.list_for_course(course_id, upcoming_only=upcoming_only)

    def join(self, user: User, live_class_id: int) -> dict:
        """
        Meeting details for an enrolled student.

        Records the attendance; joining again only bumps the join count.
        """
        live_class = self.get_live_class(live_class_id)
        self._require_enrollment(user.id, live_class.course_id)

        reason = join_blocked_reason(
            live_class.status,
            live_class.scheduled_at,
            live_class.duration,
            settings.live_class_join_window,
        )
        if reason:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)

        participant = (
            self.db.query(LiveClassParticipant)
            .filter(
                LiveClassParticipant.live_class_id == live_class.id,
                LiveClassParticipant.user_id == user.id,
            )
            .first()
        )
        if participant:
            participant.join_count += 1
            participant.joined_at = datetime.utcnow()
        else:
            attendees = (
                self.db.query(LiveClassParticipant)
                .filter(LiveClassParticipant.live_class_id == live_class.id)
                .count()
            )
            if attendees >= live_class.max_participants:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Live class is full",
                )
            self.db.add(
                LiveClassParticipant(
                    live_class_id=live_class.id,
                    user_id=user.id,
                    joined_at=datetime.utcnow(),
                    join_count=1,
                )
            )
        self.db.commit()

        logger.info(f"User {user.id} joined live class {live_class.id}")
        return self._join_config(live_class, user.full_name, "student")

    # ==================== Helpers ====================

    def _transition(
        self, live_class_id: int, expected: str, target: str, stamp_field
    ) -> LiveClass:
        live_class = self.get_live_class(live_class_id)
        if live_class.status != expected:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Live class is {live_class.status}, expected {expected}",
            )
        live_class.status = target
        if stamp_field:
            setattr(live_class, stamp_field, datetime.utcnow())
        self.db.commit()
        self.db.refresh(live_class)
        logger.info(f"Live class {live_class.id} is now {target}")
        return live_class

    def _require_enrollment(self, user_id: int, course_id: int) -> None:
        if not progress_repo.get_enrollment(self.db, user_id, course_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be enrolled in this course",
            )

    @staticmethod
    def _join_config(live_class: LiveClass, display_name: str, role: str) -> dict:
        return {
            "live_class_id": live_class.id,
            "room_name": live_class.room_name,
            "domain": settings.meeting_domain,
            "meeting_url": meeting_url(
                settings.meeting_domain, live_class.room_name, display_name
            ),
            "display_name": display_name,
            "role": role,
        }
