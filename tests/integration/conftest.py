from __future__ import annotations

import pytest
from sqlalchemy import text

from referral_engine.core.integration_db_safety import assert_safe_integration_db
from referral_engine.db.models.base import Base
from referral_engine.db.session import engine

TRUNCATE_TABLES = (
    "notifications",
    "referral_rewards",
    "referrals",
    "referral_handles",
    "advocates",
    "users",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} RESTART IDENTITY CASCADE"


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    assert_safe_integration_db(str(engine.url))


@pytest.fixture(autouse=True)
async def cleanup_db() -> None:
    # Each test runs on its own loop; pooled asyncpg connections cannot cross loops.
    await engine.dispose()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
