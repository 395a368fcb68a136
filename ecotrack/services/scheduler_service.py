"""
Background scheduler for daily maintenance
Handles:
- Resetting streaks of users who missed a day
- Deactivating expired marketplace rewards
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ecotrack.database import SessionLocal
from ecotrack.repositories.rewards_repository import UserRewardsRepository
from ecotrack.repositories.marketplace_repository import MarketplaceRewardRepository
from ecotrack.services.date_service import DateService
from ecotrack.constants import STREAK_MAINTENANCE_TIME, REWARD_EXPIRY_TIME

logger = logging.getLogger("ecotrack.scheduler")

scheduler = AsyncIOScheduler(timezone="UTC")


def _parse_time(time_str: str):
    """'00:05' -> (0, 5)"""
    hour, minute = time_str.split(":")
    return int(hour), int(minute)


def reset_stale_streaks(db) -> int:
    """Zero streaks whose last activity is before yesterday (UTC)"""
    yesterday = DateService.get_yesterday()
    count = UserRewardsRepository.reset_stale_streaks(db, yesterday)
    db.commit()
    return count


def expire_rewards(db) -> int:
    """Deactivate rewards whose expiry date has been reached"""
    count = MarketplaceRewardRepository.deactivate_expired(db, DateService.get_today())
    db.commit()
    return count


async def run_streak_maintenance():
    """Job: streak reset"""
    db = SessionLocal()
    try:
        count = reset_stale_streaks(db)
        logger.info(f"Streak maintenance: {count} streaks reset")
    except Exception as e:
        db.rollback()
        logger.error(f"Scheduler Error (Streaks): {e}")
    finally:
        db.close()


async def run_reward_expiry():
    """Job: reward expiry"""
    db = SessionLocal()
    try:
        count = expire_rewards(db)
        logger.info(f"Reward expiry: {count} rewards deactivated")
    except Exception as e:
        db.rollback()
        logger.error(f"Scheduler Error (Reward expiry): {e}")
    finally:
        db.close()


def start_scheduler():
    if not scheduler.running:
        hour, minute = _parse_time(STREAK_MAINTENANCE_TIME)
        scheduler.add_job(
            run_streak_maintenance,
            CronTrigger(hour=hour, minute=minute, timezone="UTC"),
            id='streak_maintenance',
            replace_existing=True
        )

        hour, minute = _parse_time(REWARD_EXPIRY_TIME)
        scheduler.add_job(
            run_reward_expiry,
            CronTrigger(hour=hour, minute=minute, timezone="UTC"),
            id='reward_expiry',
            replace_existing=True
        )

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
