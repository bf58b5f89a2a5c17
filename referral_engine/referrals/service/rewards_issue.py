from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.core.academic_calendar import academic_year_end
from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.models.referrals import Referral
from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.db.repo.referral_rewards_repo import ReferralRewardsRepo
from referral_engine.referrals.constants import REWARD_CAP_MONTHLY, REWARD_TYPE_AI_SESSION

from .time_utils import _month_start_utc

logger = structlog.get_logger(__name__)


async def refresh_referral_count(session: AsyncSession, *, advocate_id: int) -> int:
    advocate = await AdvocatesRepo.get_by_id_for_update(session, advocate_id)
    referral_count = await ReferralRewardsRepo.count_active_for_advocate(
        session,
        advocate_id=advocate_id,
    )
    if advocate is not None:
        advocate.referral_count = referral_count
    return referral_count


async def issue_reward_if_eligible(
    session: AsyncSession,
    *,
    referral: Referral,
    now_utc: datetime,
) -> ReferralReward | None:
    # Locks the referrer so concurrent activations see each other's rewards.
    referrer = await AdvocatesRepo.get_by_id_for_update(session, referral.referrer_id)
    if referrer is None:
        return None

    rewarded_this_month = await ReferralRewardsRepo.count_active_earned_between(
        session,
        advocate_id=referrer.id,
        from_utc=_month_start_utc(now_utc),
        to_utc=now_utc,
    )
    if rewarded_this_month >= REWARD_CAP_MONTHLY:
        logger.info(
            "referral_reward_monthly_cap_reached",
            referral_id=referral.id,
            referrer_id=referrer.id,
            rewarded_this_month=rewarded_this_month,
        )
        return None

    reward = await ReferralRewardsRepo.create(
        session,
        reward=ReferralReward(
            advocate_id=referrer.id,
            referral_id=referral.id,
            reward_type=REWARD_TYPE_AI_SESSION,
            earned_at=now_utc,
            expires_at=academic_year_end(now_utc),
            redeemed=False,
            redeemed_at=None,
            revoked=False,
            revoked_reason=None,
        ),
    )
    referrer.referral_count = await ReferralRewardsRepo.count_active_for_advocate(
        session,
        advocate_id=referrer.id,
    )
    logger.info(
        "referral_reward_issued",
        reward_id=reward.id,
        referral_id=referral.id,
        referrer_id=referrer.id,
        referral_count=referrer.referral_count,
    )
    return reward
