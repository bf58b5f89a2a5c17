from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.engine import make_url

TEST_DATABASE_NAME_RE = re.compile(r"test", re.IGNORECASE)
LOCAL_DATABASE_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres"})


@dataclass(frozen=True, slots=True)
class IntegrationDbCheck:
    is_safe: bool
    reason: str
    database_name: str
    host: str


def check_test_database(database_url: str) -> IntegrationDbCheck:
    """Decides whether integration tests may truncate tables behind ``database_url``."""
    parsed = make_url(database_url)
    database_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()

    reason = "ok"
    if parsed.get_backend_name() != "postgresql":
        reason = "integration tests run against PostgreSQL only"
    elif not database_name:
        reason = "database name is empty"
    elif TEST_DATABASE_NAME_RE.search(database_name) is None:
        reason = "database name must contain 'test'"
    elif host not in LOCAL_DATABASE_HOSTS:
        reason = f"host {host!r} is not a local test host"

    return IntegrationDbCheck(
        is_safe=reason == "ok",
        reason=reason,
        database_name=database_name,
        host=host,
    )


def assert_safe_integration_db(database_url: str) -> None:
    check = check_test_database(database_url)
    if check.is_safe:
        return
    raise RuntimeError(
        "Refusing to truncate integration tables: "
        f"{check.reason} (database={check.database_name!r}, host={check.host!r})"
    )
