from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.advocates import Advocate
from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.referrals.errors import AdvocateNotFoundError, ReferralNotAuthenticatedError


async def require_advocate(
    session: AsyncSession,
    *,
    user_id: int | None,
    for_update: bool = False,
) -> Advocate:
    if user_id is None:
        raise ReferralNotAuthenticatedError
    if for_update:
        advocate = await AdvocatesRepo.get_by_user_id_for_update(session, user_id)
    else:
        advocate = await AdvocatesRepo.get_by_user_id(session, user_id)
    if advocate is None:
        raise AdvocateNotFoundError
    return advocate
