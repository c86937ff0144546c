from .analytics import router as analytics_router
from .auth import router as auth_router
from .coupon import router as coupon_router
from .course import router as course_router
from .enrollment import router as enrollment_router
from .gamification import router as gamification_router
from .live_class import router as live_class_router
from .message import router as message_router
from .progress import router as progress_router
from .quiz import router as quiz_router

routes = [
    auth_router,
    course_router,
    enrollment_router,
    progress_router,
    gamification_router,
    coupon_router,
    quiz_router,
    live_class_router,
    message_router,
    analytics_router,
]
