from __future__ import annotations

from datetime import datetime, timedelta, timezone

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.repo.advocates_repo import AdvocatesRepo
from referral_engine.referrals.service import ReferralService

UTC = timezone.utc
NOW_UTC = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


async def _create_profile(session, *, user_id: int, full_name: str, university: str):
    return await AdvocatesRepo.create(
        session,
        user_id=user_id,
        full_name=full_name,
        university=university,
    )


async def test_invite_claim_link_activate_redeem(store, session) -> None:
    jane = store.add_advocate(full_name="Jane Doe", email="jane@example.com", university="UNILAG")
    handle = await ReferralService.ensure_handle(session, user_id=jane.user_id, now_utc=NOW_UTC)
    assert handle == "jane-doe"

    tolu_user = store.add_user(email="tolu@example.com")
    referral = await ReferralService.claim_referral(
        session,
        handle=handle,
        invitee_user_id=tolu_user.id,
        now_utc=NOW_UTC + timedelta(minutes=5),
    )
    assert referral is not None
    assert referral.status == "signed_up"

    # Onboarding creates the profile for the already-registered user.
    tolu = await _create_profile(session, user_id=tolu_user.id, full_name="Tolu Ade", university="UNILAG")
    linked = await ReferralService.link_profile_to_referral(session, profile_id=tolu.id, handle=handle)
    assert linked is referral
    assert referral.university_domain_match is True

    issued: list[ReferralReward] = []

    async def _collect(reward: ReferralReward) -> None:
        issued.append(reward)

    activation = await ReferralService.activate_referral(
        session,
        invitee_profile_id=tolu.id,
        now_utc=NOW_UTC + timedelta(days=1),
        on_reward_issued=_collect,
    )
    assert activation is not None
    assert activation.status == "activated"
    assert len(issued) == 1
    assert issued[0].advocate_id == jane.id
    assert jane.referral_count == 1

    card = await ReferralService.get_referrer_by_handle(session, handle=handle)
    assert card is not None
    assert card.referral_count == 1

    reward_type = await ReferralService.redeem_reward(
        session,
        user_id=jane.user_id,
        reward_id=issued[0].id,
        now_utc=NOW_UTC + timedelta(days=2),
    )
    assert reward_type == "ai_session"
    assert (
        await ReferralService.has_available_reward(
            session, user_id=jane.user_id, now_utc=NOW_UTC + timedelta(days=2)
        )
        is False
    )
    # Redemption does not touch the advocate counter.
    assert jane.referral_count == 1
