from __future__ import annotations

from datetime import datetime, timedelta, timezone

from referral_engine.db.models.referral_rewards import ReferralReward
from referral_engine.db.models.referrals import Referral
from referral_engine.referrals.service import ReferralService
from referral_engine.referrals.service.queries import build_join_url, minimize_display_name

UTC = timezone.utc
NOW_UTC = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
ACADEMIC_YEAR_END = datetime(2026, 7, 31, 23, 59, 59, tzinfo=UTC)


def _seed_mixed_referrals(store, referrer) -> dict[str, Referral]:
    invitee = store.add_advocate(full_name="Tolu Adebayo Ade")
    rows = {
        "pending": Referral(
            referrer_id=referrer.id,
            status="pending",
            created_at=NOW_UTC - timedelta(days=1),
            expires_at=NOW_UTC + timedelta(days=29),
        ),
        "lapsed": Referral(
            referrer_id=referrer.id,
            status="pending",
            created_at=NOW_UTC - timedelta(days=40),
            expires_at=NOW_UTC - timedelta(days=10),
        ),
        "activated": Referral(
            referrer_id=referrer.id,
            invitee_user_id=invitee.user_id,
            invitee_profile_id=invitee.id,
            status="activated",
            created_at=NOW_UTC - timedelta(days=3),
            signed_up_at=NOW_UTC - timedelta(days=3),
            activated_at=NOW_UTC - timedelta(days=2),
            expires_at=ACADEMIC_YEAR_END,
            university_domain_match=True,
        ),
        "flagged": Referral(
            referrer_id=referrer.id,
            invitee_user_id=referrer.user_id,
            status="flagged",
            created_at=NOW_UTC - timedelta(days=2),
            signed_up_at=NOW_UTC - timedelta(days=2),
            expires_at=ACADEMIC_YEAR_END,
            fraud_flags=["self_referral"],
        ),
    }
    for row in rows.values():
        store.add_referral(row)
    store.add_reward(
        ReferralReward(
            advocate_id=referrer.id,
            referral_id=rows["activated"].id,
            reward_type="ai_session",
            earned_at=NOW_UTC - timedelta(days=2),
            expires_at=ACADEMIC_YEAR_END,
            redeemed=False,
            revoked=False,
        )
    )
    referrer.referral_count = 1
    return rows


def test_minimize_display_name() -> None:
    assert minimize_display_name("Tolu Adebayo Ade") == "Tolu A."
    assert minimize_display_name("Cher") == "Cher"
    assert minimize_display_name("   ") == "Pending"
    assert minimize_display_name(None) == "Pending"


def test_build_join_url() -> None:
    assert build_join_url(base_url="https://example.com/join/", handle="jane-doe") == (
        "https://example.com/join/jane-doe"
    )
    assert build_join_url(base_url="https://example.com/join", handle=None) is None


async def test_my_referral_info_counts_effective_statuses(store, session) -> None:
    referrer = store.add_advocate(full_name="Jane Doe", handle="jane-doe")
    _seed_mixed_referrals(store, referrer)

    info = await ReferralService.get_my_referral_info(
        session,
        user_id=referrer.user_id,
        now_utc=NOW_UTC,
        join_link_base_url="https://example.com/join",
    )

    assert info is not None
    assert info.handle == "jane-doe"
    assert info.join_url == "https://example.com/join/jane-doe"
    assert info.total_referrals == 4
    assert (info.pending, info.signed_up, info.activated, info.flagged, info.expired) == (1, 0, 1, 1, 1)
    assert [reward.reward_type for reward in info.unredeemed_rewards] == ["ai_session"]
    assert info.invites_this_week == 3
    assert info.can_invite is True
    assert info.invite_cap_weekly == 10
    assert info.reward_cap_monthly == 5
    assert info.reward_cap_term == 15
    assert info.referral_count == 1


async def test_my_referral_info_without_advocate(store, session) -> None:
    user = store.add_user()

    assert (
        await ReferralService.get_my_referral_info(
            session, user_id=user.id, now_utc=NOW_UTC, join_link_base_url="https://example.com/join"
        )
        is None
    )
    assert (
        await ReferralService.get_my_referral_info(
            session, user_id=None, now_utc=NOW_UTC, join_link_base_url="https://example.com/join"
        )
        is None
    )


async def test_activity_feed_is_newest_first_with_minimized_names(store, session) -> None:
    referrer = store.add_advocate(full_name="Jane Doe", handle="jane-doe")
    _seed_mixed_referrals(store, referrer)

    items = await ReferralService.get_my_referral_activity(
        session, user_id=referrer.user_id, now_utc=NOW_UTC
    )

    assert [item.status for item in items] == ["pending", "flagged", "activated", "expired"]
    assert [item.display_name for item in items] == ["Pending", "Pending", "Tolu A.", "Pending"]
    assert items[2].university_match is True
    assert items[2].activated_at == NOW_UTC - timedelta(days=2)


async def test_activity_feed_is_capped_at_twenty(store, session) -> None:
    referrer = store.add_advocate(full_name="Jane Doe", handle="jane-doe")
    for index in range(25):
        store.add_referral(
            Referral(
                referrer_id=referrer.id,
                status="pending",
                created_at=NOW_UTC - timedelta(hours=index),
                expires_at=NOW_UTC + timedelta(days=20),
            )
        )

    items = await ReferralService.get_my_referral_activity(
        session, user_id=referrer.user_id, now_utc=NOW_UTC
    )

    assert len(items) == 20
    assert items[0].created_at == NOW_UTC


async def test_activity_feed_for_anonymous_user_is_empty(store, session) -> None:
    assert await ReferralService.get_my_referral_activity(session, user_id=None, now_utc=NOW_UTC) == []


async def test_get_referrer_by_handle_returns_public_card(store, session) -> None:
    referrer = store.add_advocate(
        full_name="Jane Doe",
        handle="jane-doe",
        university="University of Lagos",
        university_short="UNILAG",
    )
    referrer.referral_count = 3
    store.add_advocate(full_name="Hidden Person", handle="hidden-person", is_public=False)

    card = await ReferralService.get_referrer_by_handle(session, handle="Jane-Doe")

    assert card is not None
    assert card.full_name == "Jane Doe"
    assert card.university_short == "UNILAG"
    assert card.referral_count == 3
    assert await ReferralService.get_referrer_by_handle(session, handle="hidden-person") is None
    assert await ReferralService.get_referrer_by_handle(session, handle="ghost") is None


async def test_expired_referrals_report(store, session) -> None:
    referrer = store.add_advocate(full_name="Jane Doe", handle="jane-doe")
    _seed_mixed_referrals(store, referrer)
    store.add_referral(
        Referral(
            referrer_id=referrer.id,
            invitee_user_id=store.add_user().id,
            status="signed_up",
            created_at=datetime(2025, 9, 1, tzinfo=UTC),
            signed_up_at=datetime(2025, 9, 1, tzinfo=UTC),
            expires_at=datetime(2026, 7, 31, 23, 59, 59, tzinfo=UTC),
        )
    )

    report = await ReferralService.build_expired_referrals_report(
        session,
        now_utc=datetime(2026, 8, 2, tzinfo=UTC),
    )

    assert report == {"expired_pending": 2, "expired_signed_up": 1, "expired_total": 3}
