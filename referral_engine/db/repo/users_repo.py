from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_email(session: AsyncSession, user_id: int) -> str | None:
        stmt = select(User.email).where(User.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, email: str | None) -> User:
        user = User(email=email)
        session.add(user)
        await session.flush()
        return user
