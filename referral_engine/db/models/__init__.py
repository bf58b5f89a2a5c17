from referral_engine.db.models.advocates import Advocate
from referral_engine.db.models.notifications import Notification
from referral_engine.db.models.referral_handles import ReferralHandle
from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.models.referrals import Referral
from referral_engine.db.models.users import User

__all__ = [
    "Advocate",
    "Notification",
    "Referral",
    "ReferralHandle",
    "ReferralReward",
    "User",
]
