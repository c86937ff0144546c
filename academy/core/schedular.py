import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from academy.core.database import SessionLocal
from academy.services.coupon import CouponService
from academy.services.gamification import GamificationService

logger = logging.getLogger(__name__)


def deactivate_expired_coupons():
    """
    Scheduled task that switches off coupons past their valid_to date.
    Runs daily at 00:05.
    """
    db = SessionLocal()
    try:
        count = CouponService(db).deactivate_expired()
        logger.info(
            f"[{datetime.now(timezone.utc)}] Coupon cleanup completed. "
            f"Deactivated {count} expired coupons."
        )
    except Exception as e:
        logger.error(f"Error during coupon cleanup: {e}")
    finally:
        db.close()


def reset_stale_streaks():
    """
    Scheduled task that resets streaks of users inactive since before yesterday.
    Runs daily at 00:10.
    """
    db = SessionLocal()
    try:
        count = GamificationService(db).reset_stale_streaks()
        logger.info(
            f"[{datetime.now(timezone.utc)}] Streak reset completed. "
            f"Reset {count} streaks."
        )
    except Exception as e:
        logger.error(f"Error during streak reset: {e}")
    finally:
        db.close()


def start_scheduler():
    """
    Initialize and start the APScheduler for daily maintenance jobs.
    """
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        deactivate_expired_coupons,
        trigger=CronTrigger(hour=0, minute=5),
        id="deactivate_expired_coupons",
        name="Deactivate expired coupons",
        replace_existing=True,
    )
    scheduler.add_job(
        reset_stale_streaks,
        trigger=CronTrigger(hour=0, minute=10),
        id="reset_stale_streaks",
        name="Reset stale learning streaks",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Maintenance scheduler started.")

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """
    Gracefully shutdown the scheduler.
    """
    if scheduler:
        scheduler.shutdown()
        logger.info("Maintenance scheduler shut down.")
