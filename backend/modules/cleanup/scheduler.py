"""
Cleanup scheduler.

Registers the cleanup jobs on an APScheduler AsyncIOScheduler so they run
on the application's event loop. Started and stopped by the API lifespan.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from shared.config import Settings, get_settings
from modules.otp.interfaces import IOTPService
from modules.sessions.interfaces import ISessionStore
from modules.users.interfaces import IUserService

from .jobs import cleanup_expired_otps, cleanup_expired_sessions, delete_unverified_users

logger = logging.getLogger(__name__)

UNVERIFIED_SWEEP_JOB_ID = "delete-unverified-users"
SESSION_SWEEP_JOB_ID = "cleanup-expired-sessions"
OTP_SWEEP_JOB_ID = "cleanup-expired-otps"


def create_cleanup_scheduler(
    users: IUserService,
    sessions: ISessionStore,
    otps: IOTPService,
    settings: Optional[Settings] = None,
) -> AsyncIOScheduler:
    """
    Build (but do not start) the scheduler with every sweep registered.

    Overlapping runs of the same job are skipped and missed runs coalesce
    into one.
    """
    settings = settings or get_settings()
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        delete_unverified_users,
        CronTrigger.from_crontab(settings.unverified_sweep_cron, timezone="UTC"),
        id=UNVERIFIED_SWEEP_JOB_ID,
        kwargs={
            "users": users,
            "retention_hours": settings.unverified_user_retention_hours,
        },
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        cleanup_expired_sessions,
        CronTrigger.from_crontab(settings.session_sweep_cron, timezone="UTC"),
        id=SESSION_SWEEP_JOB_ID,
        kwargs={"store": sessions},
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        cleanup_expired_otps,
        CronTrigger.from_crontab(settings.otp_sweep_cron, timezone="UTC"),
        id=OTP_SWEEP_JOB_ID,
        kwargs={"otps": otps},
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    logger.info(
        "Cleanup jobs scheduled (unverified users: '%s', sessions: '%s', otps: '%s')",
        settings.unverified_sweep_cron,
        settings.session_sweep_cron,
        settings.otp_sweep_cron,
    )
    return scheduler
