from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from referral_engine.db.session import dispose_engine

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def _run_with_fresh_db_pool(awaitable: Awaitable[T], *, job_name: str) -> T:
    # Each asyncio.run gets its own loop, so pooled asyncpg connections cannot be reused.
    await dispose_engine()
    started = time.monotonic()
    try:
        return await awaitable
    finally:
        await dispose_engine()
        logger.debug(
            "worker_async_job_finished",
            job_name=job_name,
            duration_ms=int((time.monotonic() - started) * 1000),
        )


def run_async_job(awaitable: Awaitable[T], *, job_name: str = "anonymous") -> T:
    return asyncio.run(_run_with_fresh_db_pool(awaitable, job_name=job_name))
