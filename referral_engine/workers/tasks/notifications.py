from __future__ import annotations

import structlog

from referral_engine.db.repo.notifications_repo import NotificationsRepo
from referral_engine.db.session import SessionLocal
from referral_engine.workers.asyncio_runner import run_async_job
from referral_engine.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def deliver_notification_async(
    *,
    advocate_id: int,
    notification_type: str,
    title: str,
    body: str,
    metadata: dict[str, object],
) -> int:
    async with SessionLocal.begin() as session:
        notification = await NotificationsRepo.create(
            session,
            advocate_id=advocate_id,
            notification_type=notification_type,
            title=title,
            body=body,
            metadata=metadata,
        )
        notification_id = int(notification.id)
    logger.info(
        "notification_delivered",
        notification_id=notification_id,
        advocate_id=advocate_id,
        notification_type=notification_type,
    )
    return notification_id


@celery_app.task(name="referral_engine.workers.tasks.notifications.deliver_notification")
def deliver_notification(
    *,
    advocate_id: int,
    notification_type: str,
    title: str,
    body: str,
    metadata: dict[str, object],
) -> int:
    return run_async_job(
        deliver_notification_async(
            advocate_id=advocate_id,
            notification_type=notification_type,
            title=title,
            body=body,
            metadata=metadata,
        ),
        job_name="deliver_notification",
    )
