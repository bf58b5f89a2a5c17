from referral_engine.workers.tasks.notifications import deliver_notification
from referral_engine.workers.tasks.referrals_expiry import run_expired_referrals_report

__all__ = [
    "deliver_notification",
    "run_expired_referrals_report",
]
