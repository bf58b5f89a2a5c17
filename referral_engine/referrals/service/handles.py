from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.core.handles import iter_handle_candidates
from referral_engine.db.repo.referral_handles_repo import ReferralHandlesRepo
from referral_engine.referrals.errors import HandleExhaustedError

from .advocates import require_advocate

logger = structlog.get_logger(__name__)


async def ensure_handle(
    session: AsyncSession,
    *,
    user_id: int | None,
    now_utc: datetime,
) -> str:
    advocate = await require_advocate(session, user_id=user_id, for_update=True)
    if advocate.handle:
        return advocate.handle

    # Handles are never reassigned, so a registry entry wins over a fresh slug.
    reserved = await ReferralHandlesRepo.get_handle_for_advocate(
        session,
        advocate_id=advocate.id,
    )
    if reserved is not None:
        advocate.handle = reserved
        return reserved

    attempts = 0
    for candidate in iter_handle_candidates(advocate.full_name):
        attempts += 1
        reserved_now = await ReferralHandlesRepo.try_reserve(
            session,
            handle=candidate,
            advocate_id=advocate.id,
            now_utc=now_utc,
        )
        if not reserved_now:
            continue
        advocate.handle = candidate
        if advocate.referral_count is None:
            advocate.referral_count = 0
        logger.info(
            "referral_handle_assigned",
            advocate_id=advocate.id,
            handle=candidate,
            attempts=attempts,
        )
        return candidate

    logger.error(
        "referral_handle_exhausted",
        advocate_id=advocate.id,
        attempts=attempts,
    )
    raise HandleExhaustedError(f"no free handle for advocate {advocate.id}")
