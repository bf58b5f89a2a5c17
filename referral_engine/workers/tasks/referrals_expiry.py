from __future__ import annotations

from datetime import datetime, timezone

import structlog

from referral_engine.db.session import SessionLocal
from referral_engine.referrals.service import ReferralService
from referral_engine.workers.asyncio_runner import run_async_job
from referral_engine.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_expired_referrals_report_async() -> dict[str, int]:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        result = await ReferralService.build_expired_referrals_report(session, now_utc=now_utc)
    logger.info("referrals_expiry_report_finished", **result)
    return result


@celery_app.task(name="referral_engine.workers.tasks.referrals_expiry.run_expired_referrals_report")
def run_expired_referrals_report() -> dict[str, int]:
    return run_async_job(
        run_expired_referrals_report_async(),
        job_name="run_expired_referrals_report",
    )


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "referrals-expiry-report-hourly": {
            "task": "referral_engine.workers.tasks.referrals_expiry.run_expired_referrals_report",
            "schedule": 3600.0,
            "options": {"queue": "q_normal"},
        },
    }
)
