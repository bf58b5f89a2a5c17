from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.referrals.constants import STATUS_PENDING, STATUS_SIGNED_UP


async def build_expired_referrals_report(
    session: AsyncSession,
    *,
    now_utc: datetime,
) -> dict[str, int]:
    lapsed = await ReferralsRepo.count_lapsed_by_status(session, now_utc=now_utc)
    expired_pending = lapsed.get(STATUS_PENDING, 0)
    expired_signed_up = lapsed.get(STATUS_SIGNED_UP, 0)
    return {
        "expired_pending": expired_pending,
        "expired_signed_up": expired_signed_up,
        "expired_total": expired_pending + expired_signed_up,
    }
