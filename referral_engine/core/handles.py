from __future__ import annotations

import re
from collections.abc import Iterator

HANDLE_MAX_LENGTH = 30
HANDLE_MAX_SUFFIX = 50
HANDLE_FALLBACK_BASE = "advocate"
HANDLE_STORED_MAX_LENGTH = HANDLE_MAX_LENGTH + len(f"-{HANDLE_MAX_SUFFIX}")

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")


def slugify_display_name(display_name: str) -> str:
    """Builds the base handle: lowercase ``[a-z0-9-]``, hyphen-joined words, max 30 chars."""
    lowered = (display_name or "").lower()
    stripped = _DISALLOWED_RE.sub("", lowered).strip()
    hyphenated = _WHITESPACE_RE.sub("-", stripped).strip("-")
    return hyphenated[:HANDLE_MAX_LENGTH]


def iter_handle_candidates(display_name: str) -> Iterator[str]:
    base = slugify_display_name(display_name) or HANDLE_FALLBACK_BASE
    yield base
    for suffix in range(1, HANDLE_MAX_SUFFIX + 1):
        yield f"{base}-{suffix}"


def normalize_handle(raw_handle: str | None) -> str | None:
    if raw_handle is None:
        return None
    candidate = raw_handle.strip().lower()
    if not candidate or len(candidate) > HANDLE_STORED_MAX_LENGTH:
        return None
    return candidate
