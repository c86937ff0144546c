# academy/models/coupon.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.sql import func

from academy.core.database import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)

    # percentage, fixed, free
    type = Column(String(20), default="percentage", nullable=False)
    # percentage: 10 = 10%, fixed: 10 = 10 off
    value = Column(Numeric(10, 2), nullable=False, default=0)

    max_uses = Column(Integer, nullable=True)  # null = unlimited
    used_count = Column(Integer, default=0, nullable=False)

    valid_from = Column(DateTime(timezone=True), nullable=True)
    valid_to = Column(DateTime(timezone=True), nullable=True)

    # null = applies to all courses
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("admins.id"), nullable=True)

    min_purchase_amount = Column(Numeric(10, 2), nullable=True)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)  # cap for percentage

    is_active = Column(Boolean, default=True, nullable=False)
    description = Column(String(255), nullable=True)

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
        return f"<Coupon(id={self.id}, code='{self.code}', type='{self.type}')>"
