from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.core.academic_calendar import academic_year_end
from referral_engine.core.handles import normalize_handle
from referral_engine.db.models.referrals import Referral
from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.db.repo.referrals_repo import ReferralsRepo
from referral_engine.db.repo.users_repo import UsersRepo
from referral_engine.referrals.constants import (
    STATUS_FLAGGED,
    STATUS_PENDING,
    STATUS_SIGNED_UP,
)
from referral_engine.referrals.errors import ReferralNotAuthenticatedError

from .abuse_guard import collect_claim_fraud_flags

logger = structlog.get_logger(__name__)


async def claim_referral(
    session: AsyncSession,
    *,
    handle: str,
    invitee_user_id: int | None,
    now_utc: datetime,
) -> Referral | None:
    if invitee_user_id is None:
        raise ReferralNotAuthenticatedError

    normalized_handle = normalize_handle(handle)
    if normalized_handle is None:
        return None
    referrer = await AdvocatesRepo.get_by_handle(session, normalized_handle)
    if referrer is None:
        # Same outcome as a valid claim that changes nothing; handle existence stays private.
        logger.info("referral_claim_unknown_handle", invitee_user_id=invitee_user_id)
        return None

    existing = await ReferralsRepo.get_by_invitee_user_id(
        session,
        invitee_user_id=invitee_user_id,
    )
    if existing is not None:
        return existing

    invitee_email = await UsersRepo.get_email(session, invitee_user_id)
    referrer_email = await UsersRepo.get_email(session, referrer.user_id)
    fraud_flags = collect_claim_fraud_flags(
        invitee_user_id=invitee_user_id,
        referrer_user_id=referrer.user_id,
        invitee_email=invitee_email,
        referrer_email=referrer_email,
    )
    status = STATUS_FLAGGED if fraud_flags else STATUS_SIGNED_UP

    try:
        async with session.begin_nested():
            referral = await ReferralsRepo.create(
                session,
                referral=Referral(
                    referrer_id=referrer.id,
                    invitee_user_id=invitee_user_id,
                    invitee_profile_id=None,
                    status=status,
                    created_at=now_utc,
                    signed_up_at=now_utc,
                    activated_at=None,
                    expires_at=academic_year_end(now_utc),
                    university_domain_match=False,
                    fraud_flags=fraud_flags or None,
                ),
            )
    except IntegrityError:
        winner = await ReferralsRepo.get_by_invitee_user_id(
            session,
            invitee_user_id=invitee_user_id,
        )
        if winner is None:
            raise
        return winner

    if fraud_flags:
        logger.warning(
            "referral_claim_flagged",
            referral_id=referral.id,
            referrer_id=referrer.id,
            invitee_user_id=invitee_user_id,
            fraud_flags=fraud_flags,
        )
    else:
        logger.info(
            "referral_claimed",
            referral_id=referral.id,
            referrer_id=referrer.id,
            invitee_user_id=invitee_user_id,
        )
    return referral


async def link_profile_to_referral(
    session: AsyncSession,
    *,
    profile_id: int,
    handle: str,
) -> Referral | None:
    normalized_handle = normalize_handle(handle)
    if normalized_handle is None:
        return None
    referrer = await AdvocatesRepo.get_by_handle(session, normalized_handle)
    if referrer is None:
        return None

    profile = await AdvocatesRepo.get_by_id_for_update(session, profile_id)
    if profile is None:
        return None

    referral = await ReferralsRepo.get_by_invitee_user_id_for_update(
        session,
        invitee_user_id=profile.user_id,
    )
    if referral is None:
        return None
    if referral.referrer_id != referrer.id:
        logger.warning(
            "referral_link_referrer_mismatch",
            referral_id=referral.id,
            profile_id=profile_id,
            handle_referrer_id=referrer.id,
        )
        return None
    if referral.status not in {STATUS_PENDING, STATUS_SIGNED_UP}:
        return None

    referral.invitee_profile_id = profile.id
    referral.university_domain_match = bool(referrer.university) and (
        referrer.university == profile.university
    )
    profile.referred_by_advocate_id = referrer.id
    logger.info(
        "referral_profile_linked",
        referral_id=referral.id,
        profile_id=profile.id,
        university_match=referral.university_domain_match,
    )
    return referral
