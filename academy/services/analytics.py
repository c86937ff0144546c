from sqlalchemy import case, func
from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.coupon_usage import CouponUsage
from academy.models.course import Course
from academy.models.enrollment import Enrollment
from academy.models.quiz_attempt import QuizAttempt
from academy.models.text_lecture import TextLecture
from academy.models.user import User
from academy.models.video import Video
from academy.schemas.analytics import CourseStats, CourseStatsResponse, PlatformAnalytics


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def get_platform_analytics(self) -> PlatformAnalytics:
        """
        Get overall platform analytics.
        """
        total_users = self.db.query(User).count()
        total_active_users = self.db.query(User).filter(User.is_active == True).count()
        total_courses = self.db.query(Course).count()
        total_enrollments = self.db.query(Enrollment).count()
        total_videos = self.db.query(Video).count()
        total_text_lectures = self.db.query(TextLecture).count()
        total_quiz_attempts = self.db.query(QuizAttempt).count()
        total_coupon_redemptions = self.db.query(CouponUsage).count()
        return PlatformAnalytics(
            total_users=total_users,
            total_active_users=total_active_users,
            total_courses=total_courses,
            total_enrollments=total_enrollments,
            total_videos=total_videos,
            total_text_lectures=total_text_lectures,
            total_quiz_attempts=total_quiz_attempts,
            total_coupon_redemptions=total_coupon_redemptions,
        )

    @db_exception
    def get_course_stats(self) -> CourseStatsResponse:
        """
        Per-course enrollment statistics from one GROUP BY over enrollments.
        Courses without students are reported with zero counts.
        """
        rows = (
            self.db.query(
                Enrollment.course_id,
                func.count(Enrollment.id),
                func.sum(case((Enrollment.completed_at.isnot(None), 1), else_=0)),
                func.avg(Enrollment.progress),
            )
            .group_by(Enrollment.course_id)
            .all()
        )
        by_course = {
            course_id: (int(students or 0), int(completed or 0), float(avg or 0))
            for course_id, students, completed, avg in rows
        }

        courses = []
        for course in self.db.query(Course).order_by(Course.id.asc()).all():
            students, completed, average = by_course.get(course.id, (0, 0, 0.0))
            courses.append(
                CourseStats(
                    course_id=course.id,
                    title=course.title,
                    students_count=students,
                    completed_count=completed,
                    average_progress=round(average, 2),
                )
            )

        return CourseStatsResponse(
            courses=courses,
            courses_count=len(courses),
            students_count=sum(c.students_count for c in courses),
        )
