from __future__ import annotations

from collections import Counter
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.core.handles import normalize_handle
from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.db.repo.referral_rewards_repo import ReferralRewardsRepo
from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.referrals.constants import (
    ACTIVITY_FEED_LIMIT,
    ACTIVITY_PENDING_DISPLAY_NAME,
    REWARD_CAP_MONTHLY,
    REWARD_CAP_TERM,
    REWARD_TYPE_AI_SESSION,
    STATUS_ACTIVATED,
    STATUS_EXPIRED,
    STATUS_FLAGGED,
    STATUS_PENDING,
    STATUS_SIGNED_UP,
    VELOCITY_CAP_WEEKLY,
)

from .abuse_guard import count_invites_in_window, has_invite_capacity
from .models import ReferralActivityItem, ReferralInfo, ReferrerCard, RewardSummary
from .state import resolve_referral_state


def minimize_display_name(full_name: str | None) -> str:
    parts = (full_name or "").split()
    if not parts:
        return ACTIVITY_PENDING_DISPLAY_NAME
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0]} {parts[-1][0]}."


def build_join_url(*, base_url: str, handle: str | None) -> str | None:
    if not handle:
        return None
    return f"{base_url.rstrip('/')}/{handle}"


async def get_my_referral_info(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
    join_link_base_url: str,
) -> ReferralInfo | None:
    if user_id is None:
        return None
    advocate = await AdvocatesRepo.get_by_user_id(session, user_id)
    if advocate is None:
        return None

    referrals = await ReferralsRepo.list_for_referrer(session, referrer_id=advocate.id)
    status_counts = Counter(
        resolve_referral_state(referral, now_utc=now_utc).status for referral in referrals
    )
    rewards = await ReferralRewardsRepo.list_unredeemed_for_advocate(
        session,
        advocate_id=advocate.id,
    )
    invites_this_week = count_invites_in_window(
        (referral.created_at for referral in referrals),
        now_utc=now_utc,
    )

    return ReferralInfo(
        handle=advocate.handle,
        join_url=build_join_url(base_url=join_link_base_url, handle=advocate.handle),
        total_referrals=len(referrals),
        pending=status_counts[STATUS_PENDING],
        signed_up=status_counts[STATUS_SIGNED_UP],
        activated=status_counts[STATUS_ACTIVATED],
        flagged=status_counts[STATUS_FLAGGED],
        expired=status_counts[STATUS_EXPIRED],
        unredeemed_rewards=[
            RewardSummary(
                reward_id=reward.id,
                reward_type=reward.reward_type,
                earned_at=reward.earned_at,
                expires_at=reward.expires_at,
            )
            for reward in rewards
        ],
        can_invite=has_invite_capacity(invites_in_window=invites_this_week),
        invites_this_week=invites_this_week,
        invite_cap_weekly=VELOCITY_CAP_WEEKLY,
        reward_cap_monthly=REWARD_CAP_MONTHLY,
        reward_cap_term=REWARD_CAP_TERM,
        referral_count=advocate.referral_count or 0,
    )


async def get_my_referral_activity(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
) -> list[ReferralActivityItem]:
    if user_id is None:
        return []
    advocate = await AdvocatesRepo.get_by_user_id(session, user_id)
    if advocate is None:
        return []

    referrals = await ReferralsRepo.list_recent_for_referrer(
        session,
        referrer_id=advocate.id,
        limit=ACTIVITY_FEED_LIMIT,
    )
    invitee_profiles = await AdvocatesRepo.list_by_ids(
        session,
        [
            referral.invitee_profile_id
            for referral in referrals
            if referral.invitee_profile_id is not None
        ],
    )
    names_by_profile_id = {profile.id: profile.full_name for profile in invitee_profiles}

    items: list[ReferralActivityItem] = []
    for referral in referrals:
        display_name = ACTIVITY_PENDING_DISPLAY_NAME
        if referral.invitee_profile_id in names_by_profile_id:
            display_name = minimize_display_name(names_by_profile_id[referral.invitee_profile_id])
        items.append(
            ReferralActivityItem(
                referral_id=referral.id,
                status=resolve_referral_state(referral, now_utc=now_utc).status,
                display_name=display_name,
                created_at=referral.created_at,
                activated_at=referral.activated_at,
                university_match=bool(referral.university_domain_match),
            )
        )
    return items


async def get_referrer_by_handle(
    session: AsyncSession,
    *,
    handle: str,
) -> ReferrerCard | None:
    normalized_handle = normalize_handle(handle)
    if normalized_handle is None:
        return None
    advocate = await AdvocatesRepo.get_by_handle(session, normalized_handle)
    if advocate is None or not advocate.is_public:
        return None
    return ReferrerCard(
        full_name=advocate.full_name,
        university=advocate.university,
        university_short=advocate.university_short,
        referral_count=advocate.referral_count or 0,
    )


async def has_available_reward(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
    reward_type: str = REWARD_TYPE_AI_SESSION,
) -> bool:
    if user_id is None:
        return False
    advocate = await AdvocatesRepo.get_by_user_id(session, user_id)
    if advocate is None:
        return False
    return await ReferralRewardsRepo.has_available(
        session,
        advocate_id=advocate.id,
        reward_type=reward_type,
        now_utc=now_utc,
    )
