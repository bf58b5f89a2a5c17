from __future__ import annotations

from datetime import datetime

from referral_engine.referrals.constants import VELOCITY_WINDOW


def _month_start_utc(now_utc: datetime) -> datetime:
    return now_utc.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _velocity_window_start_utc(now_utc: datetime) -> datetime:
    return now_utc - VELOCITY_WINDOW
