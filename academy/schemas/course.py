# academy/schemas/course.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== Course Schemas ====================


class CourseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    price: float = Field(..., ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    is_published: bool = True


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    is_published: Optional[bool] = None


class CourseResponse(CourseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class CourseListResponse(BaseModel):
    courses: List[CourseResponse]
    total: int
    page: int
    size: int
    total_pages: int


# ==================== Chapter & Content Schemas ====================


class ChapterCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    order: int = Field(1, ge=0)


class ChapterUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    order: Optional[int] = Field(None, ge=0)


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: int = Field(0, ge=0, description="Duration in seconds")
    order: int = Field(1, ge=0)


class TextLectureCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    upload_type: str = Field("url", pattern="^(file|url)$")
    order: int = Field(0, ge=0)


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chapter_id: int
    course_id: int
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: int
    order: int


class TextLectureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chapter_id: int
    course_id: int
    title: str
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    upload_type: str
    order: int


class ChapterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    title: str
    order: int


class ChapterDetailResponse(ChapterResponse):
    videos: List[VideoResponse] = []
    text_lectures: List[TextLectureResponse] = []


class CourseDetailResponse(CourseResponse):
    chapters: List[ChapterDetailResponse] = []
    total_units: int = 0
    is_enrolled: Optional[bool] = None
