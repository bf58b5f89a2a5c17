from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.repo.referral_rewards_repo import ReferralRewardsRepo
from referral_engine.referrals.errors import (
    RewardAlreadyRedeemedError,
    RewardExpiredError,
    RewardNotFoundError,
    RewardOwnershipError,
    RewardRevokedError,
)

from .advocates import require_advocate
from .rewards_issue import refresh_referral_count

logger = structlog.get_logger(__name__)


async def redeem_reward(
    session: AsyncSession,
    *,
    user_id: int | None,
    reward_id: int,
    now_utc: datetime,
) -> str:
    advocate = await require_advocate(session, user_id=user_id)
    reward = await ReferralRewardsRepo.get_by_id_for_update(session, reward_id=reward_id)
    if reward is None:
        raise RewardNotFoundError
    if reward.advocate_id != advocate.id:
        raise RewardOwnershipError
    if reward.redeemed:
        raise RewardAlreadyRedeemedError
    if reward.revoked:
        raise RewardRevokedError
    if now_utc > reward.expires_at:
        raise RewardExpiredError

    reward.redeemed = True
    reward.redeemed_at = now_utc
    logger.info(
        "referral_reward_redeemed",
        reward_id=reward.id,
        advocate_id=advocate.id,
        reward_type=reward.reward_type,
    )
    return reward.reward_type


async def revoke_reward(
    session: AsyncSession,
    *,
    reward_id: int,
    reason: str,
) -> tuple[ReferralReward, bool]:
    """Revokes an unredeemed reward; returns the reward and whether this call changed it."""
    reward = await ReferralRewardsRepo.get_by_id_for_update(session, reward_id=reward_id)
    if reward is None:
        raise RewardNotFoundError
    if reward.redeemed:
        raise RewardAlreadyRedeemedError
    if reward.revoked:
        return reward, False

    reward.revoked = True
    reward.revoked_reason = reason
    await session.flush()
    referral_count = await refresh_referral_count(session, advocate_id=reward.advocate_id)
    logger.info(
        "referral_reward_revoked",
        reward_id=reward.id,
        advocate_id=reward.advocate_id,
        reason=reason,
        referral_count=referral_count,
    )
    return reward, True
