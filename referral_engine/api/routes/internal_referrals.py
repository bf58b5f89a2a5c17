from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Path, Request
from pydantic import BaseModel, Field

from referral_engine.core.config import get_settings
from referral_engine.db.session import SessionLocal
from referral_engine.referrals.errors import ReferralError
from referral_engine.referrals.service import ReferralService
from referral_engine.services import referral_events
from referral_engine.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

from .referrals_errors import raise_referral_http_error

router = APIRouter(tags=["internal", "referrals"])
logger = structlog.get_logger(__name__)


class LinkProfileRequest(BaseModel):
    profile_id: int = Field(gt=0)
    handle: str = Field(min_length=1, max_length=64)


class LinkProfileResponse(BaseModel):
    linked: bool
    referral_id: int | None = None
    university_match: bool | None = None


class FirstSessionCompletedRequest(BaseModel):
    invitee_profile_id: int = Field(gt=0)


class ActivationResponse(BaseModel):
    activated: bool
    referral_id: int | None = None
    status: str | None = None
    reward_id: int | None = None


class RevokeRewardRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=256)


class RevokeRewardResponse(BaseModel):
    reward_id: int = Field(gt=0)
    revoked: bool
    revoked_reason: str | None = None
    idempotent_replay: bool


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=getattr(settings, "internal_api_trusted_proxies", ""),
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_referrals_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning("internal_referrals_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


@router.post("/internal/referrals/link-profile", response_model=LinkProfileResponse)
async def link_profile_to_referral(
    payload: LinkProfileRequest,
    request: Request,
) -> LinkProfileResponse:
    _assert_internal_access(request)
    async with SessionLocal.begin() as session:
        referral = await ReferralService.link_profile_to_referral(
            session,
            profile_id=payload.profile_id,
            handle=payload.handle,
        )
        if referral is None:
            return LinkProfileResponse(linked=False)
        response = LinkProfileResponse(
            linked=True,
            referral_id=int(referral.id),
            university_match=bool(referral.university_domain_match),
        )
    return response


@router.post("/internal/referrals/first-session-completed", response_model=ActivationResponse)
async def first_session_completed(
    payload: FirstSessionCompletedRequest,
    request: Request,
) -> ActivationResponse:
    _assert_internal_access(request)
    activation = await referral_events.on_first_session_completed(
        invitee_profile_id=payload.invitee_profile_id,
    )
    if activation is None:
        return ActivationResponse(activated=False)
    return ActivationResponse(
        activated=activation.status == "activated",
        referral_id=activation.referral_id,
        status=activation.status,
        reward_id=activation.reward_id,
    )


@router.post(
    "/internal/referrals/rewards/{reward_id}/revoke",
    response_model=RevokeRewardResponse,
)
async def revoke_reward(
    payload: RevokeRewardRequest,
    request: Request,
    reward_id: int = Path(gt=0),
) -> RevokeRewardResponse:
    _assert_internal_access(request)
    try:
        async with SessionLocal.begin() as session:
            reward, changed = await ReferralService.revoke_reward(
                session,
                reward_id=reward_id,
                reason=payload.reason.strip(),
            )
            response = RevokeRewardResponse(
                reward_id=int(reward.id),
                revoked=bool(reward.revoked),
                revoked_reason=reward.revoked_reason,
                idempotent_replay=not changed,
            )
    except ReferralError as exc:
        raise_referral_http_error(exc)
    return response
