"""
Periodic cleanup jobs.

Each job logs and swallows its own failures so one bad tick never stops
the scheduler; a failed run reports 0 deleted rows.
"""

import logging
from datetime import timedelta

from shared.models import Clock, utc_now
from modules.otp.interfaces import IOTPService
from modules.sessions.interfaces import ISessionStore
from modules.users.interfaces import IUserService

logger = logging.getLogger(__name__)


async def delete_unverified_users(
    users: IUserService,
    retention_hours: int = 24,
    clock: Clock = utc_now,
) -> int:
    """Delete accounts still unverified ``retention_hours`` after creation."""
    cutoff = clock() - timedelta(hours=retention_hours)
    try:
        count = await users.delete_unverified_before(cutoff)
    except Exception:
        logger.exception("Unverified user cleanup failed")
        return 0
    logger.info("Deleted %d unverified users created before %s", count, cutoff.isoformat())
    return count


async def cleanup_expired_sessions(store: ISessionStore) -> int:
    """Remove sessions whose expiry has passed."""
    try:
        count = await store.cleanup_expired()
    except Exception:
        logger.exception("Expired session cleanup failed")
        return 0
    if count:
        logger.info("Cleaned up %d expired sessions", count)
    return count


async def cleanup_expired_otps(otps: IOTPService) -> int:
    """Remove verification codes past their expiry."""
    try:
        count = await otps.delete_expired()
    except Exception:
        logger.exception("Expired OTP cleanup failed")
        return 0
    if count:
        logger.info("Cleaned up %d expired verification codes", count)
    return count
