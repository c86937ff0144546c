from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.core.database import get_db
from academy.core.dependencies import get_current_admin
from academy.models.admin import Admin
from academy.schemas.analytics import CourseStatsResponse, PlatformAnalytics
from academy.services.analytics import AnalyticsService

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


@router.get("/platform", response_model=PlatformAnalytics)
def get_platform_analytics(
    db: Session = Depends(get_db), current_admin: Admin = Depends(get_current_admin)
):
    """
    Get platform-wide analytics.
    """
    analytics_service = AnalyticsService(db)
    return analytics_service.get_platform_analytics()


@router.get("/courses", response_model=CourseStatsResponse)
def get_course_stats(
    db: Session = Depends(get_db), current_admin: Admin = Depends(get_current_admin)
):
    """
    Per-course student counts, completions and average progress.
    """
    return AnalyticsService(db).get_course_stats()
