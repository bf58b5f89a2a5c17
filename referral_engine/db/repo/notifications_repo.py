from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.db.models.notifications import Notification


class NotificationsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        advocate_id: int,
        notification_type: str,
        title: str,
        body: str,
        metadata: dict[str, object],
    ) -> Notification:
        notification = Notification(
            advocate_id=advocate_id,
            type=notification_type,
            title=title,
            body=body,
            metadata_=metadata,
            read=False,
        )
        session.add(notification)
        await session.flush()
        return notification
