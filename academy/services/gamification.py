# academy/services/gamification.py
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from academy.core.decorator import db_exception
from academy.models.badge import Badge
from academy.models.user import User
from academy.models.user_xp import UserXP
from academy.repositories import gamification as repo
from academy.utils.leveling import level_for_xp, level_progress
from academy.utils.progress import next_streak

logger = logging.getLogger(__name__)

XP_VALUES = {
    "video_complete": 10,
    "quiz_pass": 25,
    "course_complete": 100,
    "first_course": 50,
}

DEFAULT_BADGES = [
    {"name": "First Steps", "description": "Complete your first video", "icon": "👣", "category": "achievement", "requirement_type": "videos_completed", "requirement_value": 1, "xp_reward": 10, "sort_order": 1},
    {"name": "Video Novice", "description": "Complete 10 videos", "icon": "🎬", "category": "achievement", "requirement_type": "videos_completed", "requirement_value": 10, "xp_reward": 25, "sort_order": 2},
    {"name": "Video Pro", "description": "Complete 50 videos", "icon": "🎥", "category": "achievement", "requirement_type": "videos_completed", "requirement_value": 50, "xp_reward": 100, "sort_order": 3},
    {"name": "Quiz Starter", "description": "Pass your first quiz", "icon": "✅", "category": "achievement", "requirement_type": "quizzes_passed", "requirement_value": 1, "xp_reward": 15, "sort_order": 4},
    {"name": "Quiz Master", "description": "Pass 10 quizzes", "icon": "🧠", "category": "achievement", "requirement_type": "quizzes_passed", "requirement_value": 10, "xp_reward": 50, "sort_order": 5},
    {"name": "Graduate", "description": "Complete your first course", "icon": "🎓", "category": "milestone", "requirement_type": "courses_completed", "requirement_value": 1, "xp_reward": 100, "sort_order": 6},
    {"name": "Scholar", "description": "Complete 5 courses", "icon": "📚", "category": "milestone", "requirement_type": "courses_completed", "requirement_value": 5, "xp_reward": 250, "sort_order": 7},
    {"name": "Streak Starter", "description": "Learn 3 days in a row", "icon": "🔥", "category": "streak", "requirement_type": "streak", "requirement_value": 3, "xp_reward": 20, "sort_order": 8},
    {"name": "Week Warrior", "description": "Learn 7 days in a row", "icon": "⚡", "category": "streak", "requirement_type": "streak", "requirement_value": 7, "xp_reward": 50, "sort_order": 9},
    {"name": "Dedicated", "description": "Learn 30 days in a row", "icon": "💎", "category": "streak", "requirement_type": "streak", "requirement_value": 30, "xp_reward": 200, "sort_order": 10},
    {"name": "Level 5", "description": "Reach level 5", "icon": "⭐", "category": "milestone", "requirement_type": "level", "requirement_value": 5, "xp_reward": 100, "sort_order": 11},
    {"name": "Level 10", "description": "Reach level 10", "icon": "🌟", "category": "milestone", "requirement_type": "level", "requirement_value": 10, "xp_reward": 250, "sort_order": 12},
]

# badge requirement_type -> UserXP attribute
REQUIREMENT_FIELDS = {
    "videos_completed": "videos_completed",
    "quizzes_passed": "quizzes_passed",
    "courses_completed": "courses_completed",
    "streak": "current_streak",
    "level": "level",
    "xp": "total_xp",
}


class GamificationService:
    """
    XP, levels, streaks and badges.

    Event methods only flush; the calling service owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== XP Events ====================

    def award_xp(
        self, user_id: int, amount: int, reason: str, today: Optional[date] = None
    ) -> dict:
        user_xp = repo.get_or_create_user_xp(self.db, user_id)
        today = today or datetime.utcnow().date()
        old_level = user_xp.level

        user_xp.total_xp = (user_xp.total_xp or 0) + amount
        user_xp.level = level_for_xp(user_xp.total_xp)

        user_xp.current_streak = next_streak(
            user_xp.current_streak or 0, user_xp.last_activity_date, today
        )
        user_xp.longest_streak = max(
            user_xp.longest_streak or 0, user_xp.current_streak
        )
        user_xp.last_activity_date = today

        new_badges = self._check_badges(user_xp)
        self.db.flush()

        logger.info(
            f"Awarded {amount} XP to user {user_id} for {reason} "
            f"(total={user_xp.total_xp}, level={user_xp.level})"
        )

        return {
            "xp_gained": amount,
            "total_xp": user_xp.total_xp,
            "old_level": old_level,
            "new_level": user_xp.level,
            "leveled_up": user_xp.level > old_level,
            "streak": user_xp.current_streak,
            "new_badges": new_badges,
        }

    def record_video_complete(self, user_id: int) -> dict:
        user_xp = repo.get_or_create_user_xp(self.db, user_id)
        user_xp.videos_completed = (user_xp.videos_completed or 0) + 1
        return self.award_xp(user_id, XP_VALUES["video_complete"], "video_complete")

    def record_quiz_pass(self, user_id: int) -> dict:
        user_xp = repo.get_or_create_user_xp(self.db, user_id)
        user_xp.quizzes_passed = (user_xp.quizzes_passed or 0) + 1
        return self.award_xp(user_id, XP_VALUES["quiz_pass"], "quiz_pass")

    def record_course_complete(self, user_id: int) -> dict:
        user_xp = repo.get_or_create_user_xp(self.db, user_id)
        is_first_course = (user_xp.courses_completed or 0) == 0
        user_xp.courses_completed = (user_xp.courses_completed or 0) + 1

        amount = XP_VALUES["course_complete"]
        if is_first_course:
            amount += XP_VALUES["first_course"]
        return self.award_xp(
            user_id, amount, "first_course" if is_first_course else "course_complete"
        )

    def _check_badges(self, user_xp: UserXP) -> List[str]:
        """
        Award every active badge whose requirement is met.

        Badge rewards add XP and can raise the level, which can unlock a
        level badge, so the check repeats until nothing new is earned.
        """
        earned = repo.earned_badge_ids(self.db, user_xp.user_id)
        badges = repo.list_active_badges(self.db)
        awarded = []

        while True:
            newly = [
                badge
                for badge in badges
                if badge.id not in earned and self._requirement_met(badge, user_xp)
            ]
            if not newly:
                break

            for badge in newly:
                repo.add_user_badge(self.db, user_xp.user_id, badge.id)
                earned.add(badge.id)
                user_xp.total_xp += badge.xp_reward or 0
                awarded.append(badge.name)
                logger.info(f"User {user_xp.user_id} earned badge '{badge.name}'")

            user_xp.level = level_for_xp(user_xp.total_xp)

        return awarded

    @staticmethod
    def _requirement_met(badge: Badge, user_xp: UserXP) -> bool:
        field = REQUIREMENT_FIELDS.get(badge.requirement_type)
        if not field:
            return False
        return (getattr(user_xp, field) or 0) >= badge.requirement_value

    # ==================== Queries ====================

    def get_stats(self, user_id: int) -> dict:
        user_xp = repo.get_user_xp(self.db, user_id)
        if not user_xp:
            totals = {
                "total_xp": 0,
                "level": 1,
                "current_streak": 0,
                "longest_streak": 0,
                "last_activity_date": None,
                "videos_completed": 0,
                "quizzes_passed": 0,
                "courses_completed": 0,
            }
        else:
            totals = {
                "total_xp": user_xp.total_xp,
                "level": user_xp.level,
                "current_streak": user_xp.current_streak,
                "longest_streak": user_xp.longest_streak,
                "last_activity_date": user_xp.last_activity_date,
                "videos_completed": user_xp.videos_completed,
                "quizzes_passed": user_xp.quizzes_passed,
                "courses_completed": user_xp.courses_completed,
            }

        progress = level_progress(totals["total_xp"])
        totals.update(
            current_level_xp=progress["current_level_xp"],
            next_level_xp=progress["next_level_xp"],
            progress_to_next_level=progress["progress_to_next_level"],
            xp_to_next_level=progress["xp_to_next_level"],
        )
        return totals

    @db_exception
    def get_leaderboard(
        self, limit: int = 50, current_user_id: Optional[int] = None
    ) -> dict:
        rows = (
            self.db.query(UserXP, User)
            .join(User, User.id == UserXP.user_id)
            .filter(User.is_active == True)
            .order_by(UserXP.total_xp.desc(), UserXP.user_id.asc())
            .limit(limit)
            .all()
        )

        leaderboard = [
            {
                "rank": index + 1,
                "user_id": user_xp.user_id,
                "full_name": user.full_name,
                "avatar": user.avatar,
                "total_xp": user_xp.total_xp,
                "level": user_xp.level,
                "current_streak": user_xp.current_streak,
                "is_current_user": user_xp.user_id == current_user_id,
            }
            for index, (user_xp, user) in enumerate(rows)
        ]

        current_user_rank = None
        if current_user_id is not None:
            mine = repo.get_user_xp(self.db, current_user_id)
            if mine:
                ahead = (
                    self.db.query(UserXP)
                    .filter(UserXP.total_xp > mine.total_xp)
                    .count()
                )
                current_user_rank = ahead + 1

        return {"leaderboard": leaderboard, "current_user_rank": current_user_rank}

    def list_badges(self) -> List[Badge]:
        return repo.list_active_badges(self.db)

    def get_user_badges(self, user_id: int) -> List[dict]:
        earned = {ub.badge_id: ub.earned_at for ub in repo.list_user_badges(self.db, user_id)}
        result = []
        for badge in repo.list_active_badges(self.db):
            result.append(
                {
                    "id": badge.id,
                    "name": badge.name,
                    "description": badge.description,
                    "icon": badge.icon,
                    "category": badge.category,
                    "requirement_type": badge.requirement_type,
                    "requirement_value": badge.requirement_value,
                    "xp_reward": badge.xp_reward,
                    "sort_order": badge.sort_order,
                    "earned": badge.id in earned,
                    "earned_at": earned.get(badge.id),
                }
            )
        return result

    @db_exception
    def initialize_badges(self) -> int:
        """Insert the default badges that are missing; returns how many were added."""
        existing = {name for (name,) in self.db.query(Badge.name).all()}
        created = 0
        for data in DEFAULT_BADGES:
            if data["name"] in existing:
                continue
            self.db.add(Badge(**data, is_active=True))
            created += 1

        self.db.commit()
        if created:
            logger.info(f"Initialized {created} default badges")
        return created

    def reset_stale_streaks(self, today: Optional[date] = None) -> int:
        """Zero the current streak of users with no activity since before yesterday."""
        today = today or datetime.utcnow().date()
        cutoff = today - timedelta(days=1)
        count = (
            self.db.query(UserXP)
            .filter(
                UserXP.current_streak > 0,
                UserXP.last_activity_date.isnot(None),
                UserXP.last_activity_date < cutoff,
            )
            .update({UserXP.current_streak: 0}, synchronize_session=False)
        )
        self.db.commit()
        return count
