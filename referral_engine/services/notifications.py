from __future__ import annotations

import structlog

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.referrals.constants import (
    NOTIFICATION_BODY_REFERRAL_ACTIVATED,
    NOTIFICATION_TITLE_REFERRAL_ACTIVATED,
    NOTIFICATION_TYPE_REFERRAL_ACTIVATED,
)
from referral_engine.workers.tasks.notifications import deliver_notification

logger = structlog.get_logger(__name__)


def emit_notification(
    *,
    advocate_id: int,
    notification_type: str,
    title: str,
    body: str,
    metadata: dict[str, object],
) -> bool:
    """Enqueues delivery without waiting on it; failures are logged, never raised."""
    try:
        deliver_notification.apply_async(
            kwargs={
                "advocate_id": advocate_id,
                "notification_type": notification_type,
                "title": title,
                "body": body,
                "metadata": metadata,
            },
            retry=False,
        )
    except Exception:
        logger.exception(
            "notification_enqueue_failed",
            advocate_id=advocate_id,
            notification_type=notification_type,
        )
        return False
    return True


def emit_referral_reward_notification(reward: ReferralReward) -> bool:
    return emit_notification(
        advocate_id=int(reward.advocate_id),
        notification_type=NOTIFICATION_TYPE_REFERRAL_ACTIVATED,
        title=NOTIFICATION_TITLE_REFERRAL_ACTIVATED,
        body=NOTIFICATION_BODY_REFERRAL_ACTIVATED,
        metadata={"referral_id": int(reward.referral_id), "reward_id": int(reward.id)},
    )
