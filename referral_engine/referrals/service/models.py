from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class RewardSummary:
    reward_id: int
    reward_type: str
    earned_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class ReferralInfo:
    handle: str | None
    join_url: str | None
    total_referrals: int
    pending: int
    signed_up: int
    activated: int
    flagged: int
    expired: int
    unredeemed_rewards: list[RewardSummary]
    can_invite: bool
    invites_this_week: int
    invite_cap_weekly: int
    reward_cap_monthly: int
    reward_cap_term: int
    referral_count: int


@dataclass(frozen=True, slots=True)
class ReferralActivityItem:
    referral_id: int
    status: str
    display_name: str
    created_at: datetime
    activated_at: datetime | None
    university_match: bool


@dataclass(frozen=True, slots=True)
class ReferrerCard:
    full_name: str
    university: str | None
    university_short: str | None
    referral_count: int


@dataclass(frozen=True, slots=True)
class ReferralActivation:
    referral_id: int
    referrer_id: int
    status: str
    reward_id: int | None
