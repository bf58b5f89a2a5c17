from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.db.repo.notifications_repo import NotificationsRepo
from referral_engine.db.repo.referral_handles_repo import ReferralHandlesRepo
from referral_engine.db.repo.referral_rewards_repo import ReferralRewardsRepo
from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.db.repo.users_repo import UsersRepo

__all__ = [
    "AdvocatesRepo",
    "NotificationsRepo",
    "ReferralHandlesRepo",
    "ReferralRewardsRepo",
    "ReferralsRepo",
    "UsersRepo",
]
