from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.database import get_db
from academy.core.dependencies import get_current_admin, get_current_user, get_optional_user
from academy.models.admin import Admin
from academy.models.user import User
from academy.schemas.gamification import (
    BadgeResponse,
    LeaderboardResponse,
    UserBadgeResponse,
    UserStats,
)
from academy.services.gamification import GamificationService

router = APIRouter(prefix="/gamification", tags=["Gamification"])


@router.get("/stats", response_model=UserStats)
def get_my_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """XP, level, streak and counters of the current user."""
    return GamificationService(db).get_stats(current_user.id)


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    limit: int = Query(settings.leaderboard_default_limit, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return GamificationService(db).get_leaderboard(
        limit=limit, current_user_id=current_user.id if current_user else None
    )


@router.get("/badges", response_model=List[BadgeResponse])
def list_badges(db: Session = Depends(get_db)):
    return GamificationService(db).list_badges()


@router.get("/badges/me", response_model=List[UserBadgeResponse])
def get_my_badges(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All active badges, each flagged with whether the user has earned it."""
    return GamificationService(db).get_user_badges(current_user.id)


@router.post("/badges/initialize")
def initialize_badges(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    created = GamificationService(db).initialize_badges()
    return {"success": True, "created": created}
