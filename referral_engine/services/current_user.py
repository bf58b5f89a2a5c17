from __future__ import annotations

from fastapi import Request

AUTHENTICATED_USER_HEADER = "X-User-Id"


def resolve_current_user(request: Request) -> int | None:
    """Reads the user id the authentication gateway stamped on the request."""
    raw_value = request.headers.get(AUTHENTICATED_USER_HEADER)
    if raw_value is None:
        return None
    try:
        user_id = int(raw_value.strip())
    except ValueError:
        return None
    return user_id if user_id > 0 else None
