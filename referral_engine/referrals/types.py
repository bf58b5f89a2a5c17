from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from referral_engine.referrals.constants import (
    STATUS_ACTIVATED,
    STATUS_EXPIRED,
    STATUS_FLAGGED,
    STATUS_PENDING,
    STATUS_SIGNED_UP,
)


@dataclass(frozen=True, slots=True)
class PendingState:
    status: ClassVar[str] = STATUS_PENDING
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class SignedUpState:
    status: ClassVar[str] = STATUS_SIGNED_UP
    signed_up_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class ActivatedState:
    status: ClassVar[str] = STATUS_ACTIVATED
    signed_up_at: datetime
    activated_at: datetime


@dataclass(frozen=True, slots=True)
class FlaggedState:
    status: ClassVar[str] = STATUS_FLAGGED
    fraud_flags: tuple[str, ...]
    signed_up_at: datetime | None


@dataclass(frozen=True, slots=True)
class ExpiredState:
    status: ClassVar[str] = STATUS_EXPIRED
    lapsed_status: str
    expires_at: datetime


ReferralState = PendingState | SignedUpState | ActivatedState | FlaggedState | ExpiredState
