from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from referral_engine.core.config import get_settings
from referral_engine.db.session import SessionLocal
from referral_engine.workers.celery_app import celery_app

router = APIRouter(tags=["health"])

CheckResult = dict[str, Any]


def _result(error: str | None = None, **extra: Any) -> CheckResult:
    if error is not None:
        return {"status": "failed", "error": error}
    return {"status": "ok", **extra}


async def _check_database() -> CheckResult:
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return _result(str(exc))
    return _result()


async def _check_notification_broker() -> CheckResult:
    broker = Redis.from_url(get_settings().celery_broker_url)
    try:
        pong = await broker.ping()
    except Exception as exc:
        return _result(str(exc))
    finally:
        await broker.aclose()
    return _result() if pong is True else _result(f"unexpected ping reply: {pong!r}")


def _check_notification_workers_sync() -> CheckResult:
    try:
        replies = celery_app.control.inspect(timeout=1.0).ping() or {}
    except Exception as exc:
        return _result(str(exc))
    if not replies:
        return _result("no notification workers answered ping")
    return _result(workers=len(replies))


async def _run_checks(*, include_workers: bool) -> tuple[bool, dict[str, CheckResult]]:
    database, broker = await asyncio.gather(_check_database(), _check_notification_broker())
    checks = {"database": database, "broker": broker}
    # Notification delivery is best-effort, so only /health looks at workers.
    if include_workers:
        checks["workers"] = await asyncio.to_thread(_check_notification_workers_sync)
    return all(check["status"] == "ok" for check in checks.values()), checks


def _respond(*, passed: bool, label: str, checks: dict[str, CheckResult]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK if passed else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": label, "checks": checks},
    )


@router.get("/health")
async def health() -> JSONResponse:
    passed, checks = await _run_checks(include_workers=True)
    return _respond(passed=passed, label="ok" if passed else "degraded", checks=checks)


@router.get("/ready")
async def ready() -> JSONResponse:
    passed, checks = await _run_checks(include_workers=False)
    return _respond(passed=passed, label="ready" if passed else "not_ready", checks=checks)
