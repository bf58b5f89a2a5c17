from celery import Celery

from referral_engine.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "referral_engine",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "referral_engine.workers.tasks.notifications",
        "referral_engine.workers.tasks.referrals_expiry",
    ],
)

celery_app.conf.update(
    task_default_queue="q_normal",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)


@celery_app.task(name="referral_engine.workers.celery_app.ping")
def ping() -> str:
    return "pong"
