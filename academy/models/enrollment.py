# academy/models/enrollment.py
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from academy.core.database import Base


class Enrollment(Base):
    """
    A user's enrollment in a course.
    Progress is the stored result of the progress calculator (0-100).
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Progress tracking
    progress = Column(Integer, default=0, nullable=False)
    # Content unit keys: "video:<id>" / "text_lecture:<id>"
    completed_lessons = Column(JSON, default=list, nullable=False)

    # Payment details
    amount_paid = Column(Numeric(10, 2), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)

    # Timestamps
    enrolled_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id}, progress={self.progress})>"
