from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Path, Request
from pydantic import BaseModel, Field

from referral_engine.core.config import get_settings
from referral_engine.db.session import SessionLocal
from referral_engine.referrals.errors import ReferralError
from referral_engine.referrals.service import ReferralService
from referral_engine.services.current_user import resolve_current_user

from .referrals_errors import raise_referral_http_error

router = APIRouter(tags=["referrals"])


class HandleResponse(BaseModel):
    handle: str


class CreateReferralResponse(BaseModel):
    referral_id: int = Field(gt=0)
    expires_at: datetime


class ClaimReferralRequest(BaseModel):
    handle: str = Field(min_length=1, max_length=64)


class ClaimReferralResponse(BaseModel):
    referral_id: int | None = None
    status: str | None = None


class RedeemRewardResponse(BaseModel):
    reward_type: str


class RewardSummaryResponse(BaseModel):
    id: int = Field(gt=0)
    type: str
    earned_at: datetime
    expires_at: datetime


class ReferralInfoResponse(BaseModel):
    handle: str | None = None
    join_url: str | None = None
    total_referrals: int = Field(ge=0)
    pending: int = Field(ge=0)
    signed_up: int = Field(ge=0)
    activated: int = Field(ge=0)
    flagged: int = Field(ge=0)
    expired: int = Field(ge=0)
    unredeemed_rewards: int = Field(ge=0)
    rewards: list[RewardSummaryResponse]
    can_invite: bool
    invites_this_week: int = Field(ge=0)
    invite_cap_weekly: int = Field(ge=0)
    reward_cap_monthly: int = Field(ge=0)
    reward_cap_term: int = Field(ge=0)
    referral_count: int = Field(ge=0)


class ReferralActivityItemResponse(BaseModel):
    id: int = Field(gt=0)
    status: str
    display_name: str
    created_at: datetime
    activated_at: datetime | None = None
    university_match: bool


class AvailableRewardResponse(BaseModel):
    available: bool


class ReferrerCardResponse(BaseModel):
    full_name: str
    university: str | None = None
    university_short: str | None = None
    referral_count: int = Field(ge=0)


def _require_current_user(request: Request) -> int:
    user_id = resolve_current_user(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"})
    return user_id


@router.post("/referrals/handle", response_model=HandleResponse)
async def ensure_referral_handle(request: Request) -> HandleResponse:
    user_id = resolve_current_user(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            handle = await ReferralService.ensure_handle(
                session,
                user_id=user_id,
                now_utc=now_utc,
            )
    except ReferralError as exc:
        raise_referral_http_error(exc)
    return HandleResponse(handle=handle)


@router.post("/referrals", response_model=CreateReferralResponse)
async def create_referral(request: Request) -> CreateReferralResponse:
    user_id = resolve_current_user(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            referral = await ReferralService.create_referral(
                session,
                user_id=user_id,
                now_utc=now_utc,
            )
            response = CreateReferralResponse(
                referral_id=int(referral.id),
                expires_at=referral.expires_at,
            )
    except ReferralError as exc:
        raise_referral_http_error(exc)
    return response


@router.post("/referrals/claim", response_model=ClaimReferralResponse)
async def claim_referral(payload: ClaimReferralRequest, request: Request) -> ClaimReferralResponse:
    user_id = resolve_current_user(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            referral = await ReferralService.claim_referral(
                session,
                handle=payload.handle,
                invitee_user_id=user_id,
                now_utc=now_utc,
            )
            if referral is None:
                return ClaimReferralResponse()
            response = ClaimReferralResponse(
                referral_id=int(referral.id),
                status=str(referral.status),
            )
    except ReferralError as exc:
        raise_referral_http_error(exc)
    return response


@router.post("/referrals/rewards/{reward_id}/redeem", response_model=RedeemRewardResponse)
async def redeem_reward(
    request: Request,
    reward_id: int = Path(gt=0),
) -> RedeemRewardResponse:
    user_id = resolve_current_user(request)
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            reward_type = await ReferralService.redeem_reward(
                session,
                user_id=user_id,
                reward_id=reward_id,
                now_utc=now_utc,
            )
    except ReferralError as exc:
        raise_referral_http_error(exc)
    return RedeemRewardResponse(reward_type=reward_type)


@router.get("/referrals/me", response_model=ReferralInfoResponse)
async def get_my_referral_info(request: Request) -> ReferralInfoResponse:
    user_id = _require_current_user(request)
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        info = await ReferralService.get_my_referral_info(
            session,
            user_id=user_id,
            now_utc=now_utc,
            join_link_base_url=get_settings().join_link_base_url,
        )
    if info is None:
        raise HTTPException(status_code=404, detail={"code": "E_ADVOCATE_NOT_FOUND"})

    return ReferralInfoResponse(
        handle=info.handle,
        join_url=info.join_url,
        total_referrals=info.total_referrals,
        pending=info.pending,
        signed_up=info.signed_up,
        activated=info.activated,
        flagged=info.flagged,
        expired=info.expired,
        unredeemed_rewards=len(info.unredeemed_rewards),
        rewards=[
            RewardSummaryResponse(
                id=reward.reward_id,
                type=reward.reward_type,
                earned_at=reward.earned_at,
                expires_at=reward.expires_at,
            )
            for reward in info.unredeemed_rewards
        ],
        can_invite=info.can_invite,
        invites_this_week=info.invites_this_week,
        invite_cap_weekly=info.invite_cap_weekly,
        reward_cap_monthly=info.reward_cap_monthly,
        reward_cap_term=info.reward_cap_term,
        referral_count=info.referral_count,
    )


@router.get("/referrals/me/activity", response_model=list[ReferralActivityItemResponse])
async def get_my_referral_activity(request: Request) -> list[ReferralActivityItemResponse]:
    user_id = _require_current_user(request)
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        items = await ReferralService.get_my_referral_activity(
            session,
            user_id=user_id,
            now_utc=now_utc,
        )
    return [
        ReferralActivityItemResponse(
            id=item.referral_id,
            status=item.status,
            display_name=item.display_name,
            created_at=item.created_at,
            activated_at=item.activated_at,
            university_match=item.university_match,
        )
        for item in items
    ]


@router.get("/referrals/me/rewards/available", response_model=AvailableRewardResponse)
async def get_available_reward(request: Request) -> AvailableRewardResponse:
    user_id = _require_current_user(request)
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        available = await ReferralService.has_available_reward(
            session,
            user_id=user_id,
            now_utc=now_utc,
        )
    return AvailableRewardResponse(available=available)


@router.get("/join/{handle}", response_model=ReferrerCardResponse)
async def get_referrer_card(handle: str) -> ReferrerCardResponse:
    async with SessionLocal.begin() as session:
        card = await ReferralService.get_referrer_by_handle(session, handle=handle)
    if card is None:
        raise HTTPException(status_code=404, detail={"code": "E_REFERRER_NOT_FOUND"})
    return ReferrerCardResponse(
        full_name=card.full_name,
        university=card.university,
        university_short=card.university_short,
        referral_count=card.referral_count,
    )
