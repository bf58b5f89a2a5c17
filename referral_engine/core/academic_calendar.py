from __future__ import annotations

from datetime import datetime, timezone

ACADEMIC_YEAR_FIRST_MONTH = 8


def academic_year_end(now_utc: datetime) -> datetime:
    """Returns 31 July 23:59:59 UTC closing the academic year that contains ``now_utc``.

    The academic year runs 1 August to 31 July, so any date from August onwards
    rolls the horizon into the next calendar year.
    """
    if now_utc.tzinfo is not None:
        now_utc = now_utc.astimezone(timezone.utc)
    year = now_utc.year + 1 if now_utc.month >= ACADEMIC_YEAR_FIRST_MONTH else now_utc.year
    return datetime(year, 7, 31, 23, 59, 59, tzinfo=timezone.utc)
