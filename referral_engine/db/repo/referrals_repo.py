from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referrals import Referral


class ReferralsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, referral: Referral) -> Referral:
        session.add(referral)
        await session.flush()
        return referral

    @staticmethod
    async def get_by_invitee_user_id(
        session: AsyncSession,
        *,
        invitee_user_id: int,
    ) -> Referral | None:
        stmt = select(Referral).where(Referral.invitee_user_id == invitee_user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_invitee_user_id_for_update(
        session: AsyncSession,
        *,
        invitee_user_id: int,
    ) -> Referral | None:
        stmt = (
            select(Referral)
            .where(Referral.invitee_user_id == invitee_user_id)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_invitee_profile_id_for_update(
        session: AsyncSession,
        *,
        invitee_profile_id: int,
    ) -> Referral | None:
        stmt = (
            select(Referral)
            .where(Referral.invitee_profile_id == invitee_profile_id)
            .order_by(Referral.created_at.asc())
            .limit(1)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_created_by_referrer_since(
        session: AsyncSession,
        *,
        referrer_id: int,
        since_utc: datetime,
    ) -> int:
        stmt = select(func.count(Referral.id)).where(
            Referral.referrer_id == referrer_id,
            Referral.created_at > since_utc,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_for_referrer(
        session: AsyncSession,
        *,
        referrer_id: int,
    ) -> list[Referral]:
        stmt = (
            select(Referral)
            .where(Referral.referrer_id == referrer_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_recent_for_referrer(
        session: AsyncSession,
        *,
        referrer_id: int,
        limit: int,
    ) -> list[Referral]:
        stmt = (
            select(Referral)
            .where(Referral.referrer_id == referrer_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_lapsed_by_status(
        session: AsyncSession,
        *,
        now_utc: datetime,
    ) -> dict[str, int]:
        stmt = (
            select(Referral.status, func.count(Referral.id))
            .where(
                Referral.status.in_(("pending", "signed_up")),
                Referral.expires_at < now_utc,
            )
            .group_by(Referral.status)
        )
        result = await session.execute(stmt)
        return {str(status): int(total) for status, total in result.all()}
