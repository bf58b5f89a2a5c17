from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException

from referral_engine.referrals.errors import (
    AdvocateNotFoundError,
    HandleExhaustedError,
    ReferralError,
    ReferralNotAuthenticatedError,
    ReferralRateLimitedError,
    RewardAlreadyRedeemedError,
    RewardExpiredError,
    RewardNotFoundError,
    RewardOwnershipError,
    RewardRevokedError,
)

REFERRAL_ERROR_RESPONSES: dict[type[ReferralError], tuple[int, str]] = {
    ReferralNotAuthenticatedError: (401, "E_UNAUTHENTICATED"),
    AdvocateNotFoundError: (404, "E_ADVOCATE_NOT_FOUND"),
    HandleExhaustedError: (500, "E_REFERRAL_HANDLE_EXHAUSTED"),
    ReferralRateLimitedError: (429, "E_REFERRAL_RATE_LIMITED"),
    RewardNotFoundError: (404, "E_REWARD_NOT_FOUND"),
    RewardOwnershipError: (403, "E_REWARD_FORBIDDEN"),
    RewardAlreadyRedeemedError: (409, "E_REWARD_ALREADY_REDEEMED"),
    RewardRevokedError: (409, "E_REWARD_REVOKED"),
    RewardExpiredError: (410, "E_REWARD_EXPIRED"),
}


def raise_referral_http_error(exc: ReferralError) -> NoReturn:
    status_code, code = REFERRAL_ERROR_RESPONSES.get(type(exc), (400, "E_REFERRAL_ERROR"))
    raise HTTPException(status_code=status_code, detail={"code": code}) from exc
