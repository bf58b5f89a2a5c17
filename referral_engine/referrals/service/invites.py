from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referrals import Referral
from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.referrals.constants import DORMANT_INVITE_EXPIRY, STATUS_PENDING

from .abuse_guard import count_recent_invites, enforce_velocity_cap, has_invite_capacity
from .advocates import require_advocate

logger = structlog.get_logger(__name__)


async def create_referral(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
) -> Referral:
    # The row lock on the referrer serializes concurrent invites for the cap check.
    referrer = await require_advocate(session, user_id=user_id, for_update=True)
    invites_in_window = await enforce_velocity_cap(
        session,
        referrer_id=referrer.id,
        now_utc=now_utc,
    )

    referral = await ReferralsRepo.create(
        session,
        referral=Referral(
            referrer_id=referrer.id,
            invitee_user_id=None,
            invitee_profile_id=None,
            status=STATUS_PENDING,
            created_at=now_utc,
            signed_up_at=None,
            activated_at=None,
            expires_at=now_utc + DORMANT_INVITE_EXPIRY,
            university_domain_match=False,
            fraud_flags=None,
        ),
    )
    logger.info(
        "referral_created",
        referral_id=referral.id,
        referrer_id=referrer.id,
        invites_in_window=invites_in_window + 1,
    )
    return referral


async def can_invite(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
) -> bool:
    referrer = await require_advocate(session, user_id=user_id)
    invites_in_window = await count_recent_invites(
        session,
        referrer_id=referrer.id,
        now_utc=now_utc,
    )
    return has_invite_capacity(invites_in_window=invites_in_window)
