"""
Cleanup module.

Scheduled sweeps of unverified accounts, expired sessions and expired
verification codes.
"""

from .jobs import cleanup_expired_otps, cleanup_expired_sessions, delete_unverified_users
from .scheduler import (
    OTP_SWEEP_JOB_ID,
    SESSION_SWEEP_JOB_ID,
    UNVERIFIED_SWEEP_JOB_ID,
    create_cleanup_scheduler,
)

__all__ = [
    "cleanup_expired_otps",
    "cleanup_expired_sessions",
    "delete_unverified_users",
    "create_cleanup_scheduler",
    "OTP_SWEEP_JOB_ID",
    "SESSION_SWEEP_JOB_ID",
    "UNVERIFIED_SWEEP_JOB_ID",
]
