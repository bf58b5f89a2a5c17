from referral_engine.referrals.service import ReferralService

__all__ = ["ReferralService"]
