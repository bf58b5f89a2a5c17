from __future__ import annotations

from datetime import datetime, timezone

import structlog

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.session import SessionLocal
from referral_engine.referrals.service import ReferralActivation, ReferralService
from referral_engine.services.notifications import emit_referral_reward_notification

logger = structlog.get_logger(__name__)


async def on_first_session_completed(
    *,
    invitee_profile_id: int,
    now_utc: datetime | None = None,
) -> ReferralActivation | None:
    resolved_now_utc = now_utc or datetime.now(timezone.utc)
    issued_rewards: list[ReferralReward] = []

    async def _collect_issued_reward(reward: ReferralReward) -> None:
        issued_rewards.append(reward)

    async with SessionLocal.begin() as session:
        activation = await ReferralService.activate_referral(
            session,
            invitee_profile_id=invitee_profile_id,
            now_utc=resolved_now_utc,
            on_reward_issued=_collect_issued_reward,
        )

    # Notifications go out only once the reward row is committed.
    for reward in issued_rewards:
        emit_referral_reward_notification(reward)

    if activation is not None:
        logger.info(
            "referral_first_session_processed",
            invitee_profile_id=invitee_profile_id,
            referral_id=activation.referral_id,
            status=activation.status,
            rewarded=activation.reward_id is not None,
        )
    return activation
