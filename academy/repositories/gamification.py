# academy/repositories/gamification.py
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.badge import Badge, UserBadge
from academy.models.user_xp import UserXP


@db_exception
def get_user_xp(db: Session, user_id: int) -> Optional[UserXP]:
    return db.query(UserXP).filter(UserXP.user_id == user_id).first()


@db_exception
def get_or_create_user_xp(db: Session, user_id: int) -> UserXP:
    user_xp = db.query(UserXP).filter(UserXP.user_id == user_id).first()
    if user_xp:
        return user_xp

    user_xp = UserXP(
        user_id=user_id,
        total_xp=0,
        level=1,
        current_streak=0,
        longest_streak=0,
        videos_completed=0,
        quizzes_passed=0,
        courses_completed=0,
    )
    db.add(user_xp)
    db.flush()
    return user_xp


@db_exception
def list_active_badges(db: Session) -> List[Badge]:
    return (
        db.query(Badge)
        .filter(Badge.is_active == True)
        .order_by(Badge.sort_order.asc(), Badge.id.asc())
        .all()
    )


@db_exception
def list_user_badges(db: Session, user_id: int) -> List[UserBadge]:
    return db.query(UserBadge).filter(UserBadge.user_id == user_id).all()


@db_exception
def earned_badge_ids(db: Session, user_id: int) -> Set[int]:
    rows = db.query(UserBadge.badge_id).filter(UserBadge.user_id == user_id).all()
    return {row[0] for row in rows}


@db_exception
def add_user_badge(db: Session, user_id: int, badge_id: int) -> UserBadge:
    user_badge = UserBadge(user_id=user_id, badge_id=badge_id)
    db.add(user_badge)
    db.flush()
    return user_badge
