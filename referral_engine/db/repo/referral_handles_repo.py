from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referral_handles import ReferralHandle


class ReferralHandlesRepo:
    @staticmethod
    async def get_handle_for_advocate(session: AsyncSession, *, advocate_id: int) -> str | None:
        stmt = select(ReferralHandle.handle).where(ReferralHandle.advocate_id == advocate_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def try_reserve(
        session: AsyncSession,
        *,
        handle: str,
        advocate_id: int,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            pg_insert(ReferralHandle)
            .values(handle=handle, advocate_id=advocate_id, created_at=now_utc)
            .on_conflict_do_nothing(index_elements=[ReferralHandle.handle])
            .returning(ReferralHandle.handle)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
