# academy/schemas/enrollment.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from academy.schemas.gamification import XPAward

# ==================== Enrollment Schemas ====================


class EnrollmentCreate(BaseModel):
    """Schema for enrolling in a course"""

    course_id: int = Field(..., description="Course ID to enroll in")
    coupon_code: Optional[str] = Field(None, max_length=50)
    payment_reference: Optional[str] = Field(
        None, description="Payment reference for paid courses"
    )


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    course_id: int
    progress: int
    completed_lessons: List[str] = []
    amount_paid: Optional[Decimal] = None
    coupon_id: Optional[int] = None
    enrolled_at: datetime
    last_accessed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    course_title: Optional[str] = None


class EnrollmentListResponse(BaseModel):
    enrollments: List[EnrollmentResponse]
    total: int
    page: int
    size: int
    total_pages: int


class VideoProgressUpdate(BaseModel):
    video_id: int
    watch_time: float = Field(..., ge=0, description="Seconds watched")
    duration: float = Field(..., ge=0, description="Video length in seconds")


class ContentCompleteRequest(BaseModel):
    content_id: int
    content_type: Literal["video", "text_lecture"]


class ProgressUpdateResponse(BaseModel):
    success: bool = True
    course_id: int
    progress: int
    completed: bool = Field(..., description="Whether this content unit is complete")
    course_completed: bool = False
    # keyed by event: video_complete, course_complete
    xp: Optional[Dict[str, XPAward]] = None
