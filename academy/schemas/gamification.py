# academy/schemas/gamification.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    icon: str
    category: str
    requirement_type: str
    requirement_value: int
    xp_reward: int
    sort_order: int


class UserBadgeResponse(BadgeResponse):
    earned: bool = False
    earned_at: Optional[datetime] = None


class XPAward(BaseModel):
    xp_gained: int
    total_xp: int
    old_level: int
    new_level: int
    leveled_up: bool
    streak: int
    new_badges: List[str] = []


class UserStats(BaseModel):
    total_xp: int
    level: int
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None
    videos_completed: int
    quizzes_passed: int
    courses_completed: int
    current_level_xp: int
    next_level_xp: int
    progress_to_next_level: int
    xp_to_next_level: int


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    total_xp: int
    level: int
    current_streak: int
    is_current_user: bool = False


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]
    current_user_rank: Optional[int] = None
