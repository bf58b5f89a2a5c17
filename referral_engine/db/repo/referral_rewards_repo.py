from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.referral_rewards import ReferralReward


class ReferralRewardsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, reward: ReferralReward) -> ReferralReward:
        session.add(reward)
        await session.flush()
        return reward

    @staticmethod
    async def get_by_id_for_update(
        session: AsyncSession,
        *,
        reward_id: int,
    ) -> ReferralReward | None:
        stmt = select(ReferralReward).where(ReferralReward.id == reward_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def count_active_earned_between(
        session: AsyncSession,
        *,
        advocate_id: int,
        from_utc: datetime,
        to_utc: datetime,
    ) -> int:
        stmt = select(func.count(ReferralReward.id)).where(
            ReferralReward.advocate_id == advocate_id,
            ReferralReward.revoked.is_(False),
            ReferralReward.earned_at >= from_utc,
            ReferralReward.earned_at <= to_utc,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_active_for_advocate(
        session: AsyncSession,
        *,
        advocate_id: int,
    ) -> int:
        stmt = select(func.count(ReferralReward.id)).where(
            ReferralReward.advocate_id == advocate_id,
            ReferralReward.revoked.is_(False),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_unredeemed_for_advocate(
        session: AsyncSession,
        *,
        advocate_id: int,
    ) -> list[ReferralReward]:
        stmt = (
            select(ReferralReward)
            .where(
                ReferralReward.advocate_id == advocate_id,
                ReferralReward.redeemed.is_(False),
                ReferralReward.revoked.is_(False),
            )
            .order_by(ReferralReward.earned_at.asc(), ReferralReward.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def has_available(
        session: AsyncSession,
        *,
        advocate_id: int,
        reward_type: str,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            select(ReferralReward.id)
            .where(
                ReferralReward.advocate_id == advocate_id,
                ReferralReward.reward_type == reward_type,
                ReferralReward.redeemed.is_(False),
                ReferralReward.revoked.is_(False),
                ReferralReward.expires_at > now_utc,
            )
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
