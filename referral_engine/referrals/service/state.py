from __future__ import annotations

from datetime import datetime

from referral_engine.db.models.referrals import Referral
from referral_engine.referrals.constants import (
    EXPIRABLE_STATUSES,
    STATUS_ACTIVATED,
    STATUS_FLAGGED,
    STATUS_PENDING,
    STATUS_SIGNED_UP,
)
from referral_engine.referrals.types import (
    ActivatedState,
    ExpiredState,
    FlaggedState,
    PendingState,
    ReferralState,
    SignedUpState,
)


def is_lapsed(referral: Referral, *, now_utc: datetime) -> bool:
    return referral.status in EXPIRABLE_STATUSES and now_utc > referral.expires_at


def resolve_referral_state(referral: Referral, *, now_utc: datetime) -> ReferralState:
    """Maps a stored referral row onto its state variant.

    Expiry is evaluated here rather than persisted: a ``pending`` or
    ``signed_up`` row past ``expires_at`` reads as :class:`ExpiredState`.
    Rows whose timestamps contradict their status raise ``ValueError``.
    """
    if is_lapsed(referral, now_utc=now_utc):
        return ExpiredState(lapsed_status=referral.status, expires_at=referral.expires_at)

    if referral.status == STATUS_PENDING:
        return PendingState(created_at=referral.created_at, expires_at=referral.expires_at)

    if referral.status == STATUS_SIGNED_UP:
        if referral.signed_up_at is None:
            raise ValueError(f"referral {referral.id} is signed_up without signed_up_at")
        return SignedUpState(signed_up_at=referral.signed_up_at, expires_at=referral.expires_at)

    if referral.status == STATUS_ACTIVATED:
        if referral.signed_up_at is None or referral.activated_at is None:
            raise ValueError(f"referral {referral.id} is activated without timestamps")
        return ActivatedState(
            signed_up_at=referral.signed_up_at,
            activated_at=referral.activated_at,
        )

    if referral.status == STATUS_FLAGGED:
        if not referral.fraud_flags:
            raise ValueError(f"referral {referral.id} is flagged without fraud flags")
        return FlaggedState(
            fraud_flags=tuple(referral.fraud_flags),
            signed_up_at=referral.signed_up_at,
        )

    raise ValueError(f"unsupported referral status: {referral.status}")
