# academy/models/live_class.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from academy.core.database import Base


class LiveClass(Base):
    __tablename__ = "live_classes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    chapter_id = Column(Integer, ForeignKey("chapters.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("admins.id"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, default=60, nullable=False)  # minutes

    # meeting room on the video conferencing server
    room_name = Column(String(100), unique=True, nullable=False)
    max_participants = Column(Integer, default=50, nullable=False)
    is_recorded = Column(Boolean, default=False, nullable=False)
    recording_url = Column(String(500), nullable=True)

    # scheduled, live, ended, cancelled
    status = Column(String(20), default="scheduled", nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<LiveClass(id={self.id}, course_id={self.course_id}, status='{self.status}')>"


class LiveClassParticipant(Base):
    __tablename__ = "live_class_participants"
    __table_args__ = (
        UniqueConstraint("live_class_id", "user_id", name="uq_live_class_participant"),
    )

    id = Column(Integer, primary_key=True, index=True)
    live_class_id = Column(
        Integer, ForeignKey("live_classes.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), nullable=False)
    join_count = Column(Integer, default=1, nullable=False)
