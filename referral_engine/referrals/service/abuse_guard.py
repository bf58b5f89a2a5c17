from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.referrals.constants import FRAUD_FLAG_SELF_REFERRAL, VELOCITY_CAP_WEEKLY
from referral_engine.referrals.errors import ReferralRateLimitedError

from .time_utils import _velocity_window_start_utc


def count_invites_in_window(created_at_values: Iterable[datetime], *, now_utc: datetime) -> int:
    window_start_utc = _velocity_window_start_utc(now_utc)
    return sum(1 for created_at in created_at_values if created_at > window_start_utc)


def has_invite_capacity(*, invites_in_window: int) -> bool:
    return invites_in_window < VELOCITY_CAP_WEEKLY


def collect_claim_fraud_flags(
    *,
    invitee_user_id: int,
    referrer_user_id: int,
    invitee_email: str | None,
    referrer_email: str | None,
) -> list[str]:
    """Returns the fraud-flag tokens raised by a claim; an empty list means clean.

    Emails are compared exactly as stored, and only when both are present.
    """
    flags: list[str] = []
    same_account = invitee_user_id == referrer_user_id
    same_email = bool(invitee_email) and bool(referrer_email) and invitee_email == referrer_email
    if same_account or same_email:
        flags.append(FRAUD_FLAG_SELF_REFERRAL)
    return flags


async def count_recent_invites(
    session: AsyncSession,
    *,
    referrer_id: int,
    now_utc: datetime,
) -> int:
    return await ReferralsRepo.count_created_by_referrer_since(
        session,
        referrer_id=referrer_id,
        since_utc=_velocity_window_start_utc(now_utc),
    )


async def enforce_velocity_cap(
    session: AsyncSession,
    *,
    referrer_id: int,
    now_utc: datetime,
) -> int:
    invites_in_window = await count_recent_invites(
        session,
        referrer_id=referrer_id,
        now_utc=now_utc,
    )
    if not has_invite_capacity(invites_in_window=invites_in_window):
        raise ReferralRateLimitedError
    return invites_in_window
