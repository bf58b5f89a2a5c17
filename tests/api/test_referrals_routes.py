from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

from fastapi.testclient import TestClient

from referral_engine.api.routes import referrals as referrals_routes
from referral_engine.main import app
from referral_engine.referrals.errors import (
    HandleExhaustedError,
    ReferralRateLimitedError,
    RewardAlreadyRedeemedError,
    RewardExpiredError,
    RewardOwnershipError,
)
from referral_engine.referrals.service import (
    ReferralActivityItem,
    ReferralInfo,
    ReferrerCard,
    RewardSummary,
)
from tests.api.referral_api_fakes import FakeSessionLocal, internal_settings

UTC = timezone.utc
EARNED_AT = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
EXPIRES_AT = datetime(2026, 7, 31, 23, 59, 59, tzinfo=UTC)
USER_HEADERS = {"X-User-Id": "42"}


def _patch_sessions(monkeypatch) -> FakeSessionLocal:
    session_local = FakeSessionLocal()
    monkeypatch.setattr(referrals_routes, "SessionLocal", session_local)
    return session_local


def test_ensure_handle_returns_handle(monkeypatch) -> None:
    _patch_sessions(monkeypatch)
    calls: list[int | None] = []

    async def fake_ensure_handle(session, *, user_id, now_utc):
        calls.append(user_id)
        return "jane-doe"

    monkeypatch.setattr(referrals_routes.ReferralService, "ensure_handle", fake_ensure_handle)

    client = TestClient(app)
    response = client.post("/referrals/handle", headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"handle": "jane-doe"}
    assert calls == [42]


def test_ensure_handle_without_user_is_unauthenticated(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    client = TestClient(app)
    response = client.post("/referrals/handle")

    assert response.status_code == 401
    assert response.json() == {"detail": {"code": "E_UNAUTHENTICATED"}}


def test_ensure_handle_exhausted_maps_to_500(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_ensure_handle(session, *, user_id, now_utc):
        raise HandleExhaustedError("no free handle")

    monkeypatch.setattr(referrals_routes.ReferralService, "ensure_handle", fake_ensure_handle)

    client = TestClient(app)
    response = client.post("/referrals/handle", headers=USER_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"detail": {"code": "E_REFERRAL_HANDLE_EXHAUSTED"}}


def test_create_referral_rate_limited(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_create_referral(session, *, user_id, now_utc):
        raise ReferralRateLimitedError

    monkeypatch.setattr(referrals_routes.ReferralService, "create_referral", fake_create_referral)

    client = TestClient(app)
    response = client.post("/referrals", headers=USER_HEADERS)

    assert response.status_code == 429
    assert response.json() == {"detail": {"code": "E_REFERRAL_RATE_LIMITED"}}


def test_create_referral_returns_id_and_expiry(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_create_referral(session, *, user_id, now_utc):
        return SimpleNamespace(id=7, expires_at=EXPIRES_AT)

    monkeypatch.setattr(referrals_routes.ReferralService, "create_referral", fake_create_referral)

    client = TestClient(app)
    response = client.post("/referrals", headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json()["referral_id"] == 7


def test_claim_with_unknown_handle_looks_like_success(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_claim(session, *, handle, invitee_user_id, now_utc):
        assert handle == "ghost"
        return None

    monkeypatch.setattr(referrals_routes.ReferralService, "claim_referral", fake_claim)

    client = TestClient(app)
    response = client.post("/referrals/claim", json={"handle": "ghost"}, headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"referral_id": None, "status": None}


def test_claim_returns_referral(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_claim(session, *, handle, invitee_user_id, now_utc):
        assert invitee_user_id == 42
        return SimpleNamespace(id=11, status="signed_up")

    monkeypatch.setattr(referrals_routes.ReferralService, "claim_referral", fake_claim)

    client = TestClient(app)
    response = client.post("/referrals/claim", json={"handle": "jane-doe"}, headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"referral_id": 11, "status": "signed_up"}


def test_claim_rejects_empty_handle() -> None:
    client = TestClient(app)
    response = client.post("/referrals/claim", json={"handle": ""}, headers=USER_HEADERS)

    assert response.status_code == 422


def test_redeem_reward_error_codes(monkeypatch) -> None:
    _patch_sessions(monkeypatch)
    errors = iter([RewardAlreadyRedeemedError(), RewardExpiredError(), RewardOwnershipError()])

    async def fake_redeem(session, *, user_id, reward_id, now_utc):
        raise next(errors)

    monkeypatch.setattr(referrals_routes.ReferralService, "redeem_reward", fake_redeem)

    client = TestClient(app)
    responses = [
        client.post("/referrals/rewards/5/redeem", headers=USER_HEADERS) for _ in range(3)
    ]

    assert [response.status_code for response in responses] == [409, 410, 403]
    assert [response.json()["detail"]["code"] for response in responses] == [
        "E_REWARD_ALREADY_REDEEMED",
        "E_REWARD_EXPIRED",
        "E_REWARD_FORBIDDEN",
    ]


def test_redeem_reward_returns_type(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_redeem(session, *, user_id, reward_id, now_utc):
        assert reward_id == 5
        return "ai_session"

    monkeypatch.setattr(referrals_routes.ReferralService, "redeem_reward", fake_redeem)

    client = TestClient(app)
    response = client.post("/referrals/rewards/5/redeem", headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"reward_type": "ai_session"}


def test_my_referral_info(monkeypatch) -> None:
    _patch_sessions(monkeypatch)
    monkeypatch.setattr(referrals_routes, "get_settings", lambda: internal_settings())

    async def fake_info(session, *, user_id, now_utc, join_link_base_url):
        assert join_link_base_url == "https://lexbar.example/join"
        return ReferralInfo(
            handle="jane-doe",
            join_url="https://lexbar.example/join/jane-doe",
            total_referrals=3,
            pending=1,
            signed_up=0,
            activated=1,
            flagged=0,
            expired=1,
            unredeemed_rewards=[
                RewardSummary(
                    reward_id=9,
                    reward_type="ai_session",
                    earned_at=EARNED_AT,
                    expires_at=EXPIRES_AT,
                )
            ],
            can_invite=True,
            invites_this_week=2,
            invite_cap_weekly=10,
            reward_cap_monthly=5,
            reward_cap_term=15,
            referral_count=1,
        )

    monkeypatch.setattr(referrals_routes.ReferralService, "get_my_referral_info", fake_info)

    client = TestClient(app)
    response = client.get("/referrals/me", headers=USER_HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert payload["join_url"] == "https://lexbar.example/join/jane-doe"
    assert payload["unredeemed_rewards"] == 1
    assert payload["rewards"][0]["id"] == 9
    assert payload["expired"] == 1
    assert payload["referral_count"] == 1


def test_my_referral_info_requires_user_and_advocate(monkeypatch) -> None:
    _patch_sessions(monkeypatch)
    monkeypatch.setattr(referrals_routes, "get_settings", lambda: internal_settings())

    async def fake_info(session, *, user_id, now_utc, join_link_base_url):
        return None

    monkeypatch.setattr(referrals_routes.ReferralService, "get_my_referral_info", fake_info)

    client = TestClient(app)
    assert client.get("/referrals/me").status_code == 401
    missing = client.get("/referrals/me", headers=USER_HEADERS)
    assert missing.status_code == 404
    assert missing.json() == {"detail": {"code": "E_ADVOCATE_NOT_FOUND"}}


def test_my_referral_activity(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_activity(session, *, user_id, now_utc):
        return [
            ReferralActivityItem(
                referral_id=3,
                status="activated",
                display_name="Tolu A.",
                created_at=EARNED_AT,
                activated_at=EARNED_AT,
                university_match=True,
            )
        ]

    monkeypatch.setattr(referrals_routes.ReferralService, "get_my_referral_activity", fake_activity)

    client = TestClient(app)
    response = client.get("/referrals/me/activity", headers=USER_HEADERS)

    assert response.status_code == 200
    assert response.json()[0]["display_name"] == "Tolu A."
    assert response.json()[0]["university_match"] is True


def test_available_reward(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_has_available(session, *, user_id, now_utc):
        return user_id == 42

    monkeypatch.setattr(referrals_routes.ReferralService, "has_available_reward", fake_has_available)

    client = TestClient(app)

    assert client.get("/referrals/me/rewards/available", headers=USER_HEADERS).json() == {
        "available": True
    }
    assert client.get("/referrals/me/rewards/available", headers={"X-User-Id": "7"}).json() == {
        "available": False
    }


def test_my_reads_require_user() -> None:
    client = TestClient(app)

    for path in ("/referrals/me", "/referrals/me/activity", "/referrals/me/rewards/available"):
        response = client.get(path)
        assert response.status_code == 401
        assert response.json() == {"detail": {"code": "E_UNAUTHENTICATED"}}


def test_join_page_card(monkeypatch) -> None:
    _patch_sessions(monkeypatch)

    async def fake_card(session, *, handle):
        if handle != "jane-doe":
            return None
        return ReferrerCard(
            full_name="Jane Doe",
            university="University of Lagos",
            university_short="UNILAG",
            referral_count=4,
        )

    monkeypatch.setattr(referrals_routes.ReferralService, "get_referrer_by_handle", fake_card)

    client = TestClient(app)
    found = client.get("/join/jane-doe")
    missing = client.get("/join/ghost")

    assert found.status_code == 200
    assert found.json()["referral_count"] == 4
    assert missing.status_code == 404
    assert missing.json() == {"detail": {"code": "E_REFERRER_NOT_FOUND"}}
