from __future__ import annotations

from .abuse_guard import collect_claim_fraud_flags, count_invites_in_window, has_invite_capacity
from .activation import activate_referral
from .claims import claim_referral, link_profile_to_referral
from .handles import ensure_handle
from .invites import can_invite, create_referral
from .models import (
    ReferralActivation,
    ReferralActivityItem,
    ReferralInfo,
    ReferrerCard,
    RewardSummary,
)
from .queries import (
    get_my_referral_activity,
    get_my_referral_info,
    get_referrer_by_handle,
    has_available_reward,
)
from .reports import build_expired_referrals_report
from .rewards_issue import issue_reward_if_eligible
from .rewards_redeem import redeem_reward, revoke_reward
from .state import resolve_referral_state


class ReferralService:
    ensure_handle = staticmethod(ensure_handle)
    create_referral = staticmethod(create_referral)
    can_invite = staticmethod(can_invite)
    claim_referral = staticmethod(claim_referral)
    link_profile_to_referral = staticmethod(link_profile_to_referral)
    activate_referral = staticmethod(activate_referral)
    issue_reward_if_eligible = staticmethod(issue_reward_if_eligible)
    redeem_reward = staticmethod(redeem_reward)
    revoke_reward = staticmethod(revoke_reward)
    get_my_referral_info = staticmethod(get_my_referral_info)
    get_my_referral_activity = staticmethod(get_my_referral_activity)
    get_referrer_by_handle = staticmethod(get_referrer_by_handle)
    has_available_reward = staticmethod(has_available_reward)
    build_expired_referrals_report = staticmethod(build_expired_referrals_report)


__all__ = [
    "ReferralActivation",
    "ReferralActivityItem",
    "ReferralInfo",
    "ReferralService",
    "ReferrerCard",
    "RewardSummary",
    "collect_claim_fraud_flags",
    "count_invites_in_window",
    "has_invite_capacity",
    "resolve_referral_state",
]
