from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.advocates import Advocate


class AdvocatesRepo:
    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, advocate_id: int) -> Advocate | None:
        stmt = select(Advocate).where(Advocate.id == advocate_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_user_id(session: AsyncSession, user_id: int) -> Advocate | None:
        stmt = select(Advocate).where(Advocate.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_user_id_for_update(session: AsyncSession, user_id: int) -> Advocate | None:
        stmt = select(Advocate).where(Advocate.user_id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_handle(session: AsyncSession, handle: str) -> Advocate | None:
        stmt = select(Advocate).where(Advocate.handle == handle)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        advocate_ids: Sequence[int],
    ) -> list[Advocate]:
        ids = tuple({int(advocate_id) for advocate_id in advocate_ids})
        if not ids:
            return []
        stmt = select(Advocate).where(Advocate.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: int,
        full_name: str,
        university: str | None,
        university_short: str | None = None,
        is_public: bool = True,
    ) -> Advocate:
        advocate = Advocate(
            user_id=user_id,
            full_name=full_name,
            university=university,
            university_short=university_short,
            is_public=is_public,
            referral_count=0,
        )
        session.add(advocate)
        await session.flush()
        return advocate
