from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.referrals.constants import (
    STATUS_ACTIVATED,
    STATUS_FLAGGED,
    STATUS_SIGNED_UP,
)

from .models import ReferralActivation
from .rewards_issue import issue_reward_if_eligible
from .state import is_lapsed

logger = structlog.get_logger(__name__)


async def activate_referral(
    session: AsyncSession,
    *,
    invitee_profile_id: int,
    now_utc: datetime,
    on_reward_issued: Callable[[ReferralReward], Awaitable[None]] | None = None,
) -> ReferralActivation | None:
    referral = await ReferralsRepo.get_by_invitee_profile_id_for_update(
        session,
        invitee_profile_id=invitee_profile_id,
    )
    if referral is None or referral.status != STATUS_SIGNED_UP:
        return None
    if is_lapsed(referral, now_utc=now_utc):
        logger.info(
            "referral_activation_skipped_expired",
            referral_id=referral.id,
            expires_at=referral.expires_at.isoformat(),
        )
        return None

    if referral.fraud_flags:
        referral.status = STATUS_FLAGGED
        logger.warning(
            "referral_activation_blocked",
            referral_id=referral.id,
            referrer_id=referral.referrer_id,
            fraud_flags=list(referral.fraud_flags),
        )
        return ReferralActivation(
            referral_id=referral.id,
            referrer_id=referral.referrer_id,
            status=STATUS_FLAGGED,
            reward_id=None,
        )

    referral.status = STATUS_ACTIVATED
    referral.activated_at = now_utc
    logger.info(
        "referral_activated",
        referral_id=referral.id,
        referrer_id=referral.referrer_id,
        invitee_profile_id=invitee_profile_id,
    )

    reward = await issue_reward_if_eligible(session, referral=referral, now_utc=now_utc)
    if reward is not None and on_reward_issued is not None:
        await on_reward_issued(reward)

    return ReferralActivation(
        referral_id=referral.id,
        referrer_id=referral.referrer_id,
        status=STATUS_ACTIVATED,
        reward_id=reward.id if reward is not None else None,
    )
