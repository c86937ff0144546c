from typing import List

from pydantic import BaseModel


class PlatformAnalytics(BaseModel):
    total_users: int
    total_active_users: int
    total_courses: int
    total_enrollments: int
    total_videos: int
    total_text_lectures: int
    total_quiz_attempts: int
    total_coupon_redemptions: int


class CourseStats(BaseModel):
    course_id: int
    title: str
    students_count: int
    completed_count: int
    average_progress: float


class CourseStatsResponse(BaseModel):
    courses: List[CourseStats]
    courses_count: int
    students_count: int
