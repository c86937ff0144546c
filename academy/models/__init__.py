"""
Models package initialization
Import all models so they are registered on the declarative Base
"""

from .admin import Admin
from .badge import Badge, UserBadge
from .chapter import Chapter
from .content_progress import TextLectureProgress, VideoProgress
from .coupon import Coupon
from .coupon_usage import CouponUsage
from .course import Course
from .enrollment import Enrollment
from .live_class import LiveClass, LiveClassParticipant
from .message import AdminMessage, AdminMessageReply
from .quiz import Quiz, QuizQuestion
from .quiz_attempt import QuizAttempt
from .text_lecture import TextLecture
from .user import User
from .user_xp import UserXP
from .video import Video

# Make models available at package level
__all__ = [
    "Admin",
    "AdminMessage",
    "AdminMessageReply",
    "Badge",
    "Chapter",
    "Coupon",
    "CouponUsage",
    "Course",
    "Enrollment",
    "LiveClass",
    "LiveClassParticipant",
    "Quiz",
    "QuizAttempt",
    "QuizQuestion",
    "TextLecture",
    "TextLectureProgress",
    "User",
    "UserBadge",
    "UserXP",
    "Video",
    "VideoProgress",
]
