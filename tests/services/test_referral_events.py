from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from types import SimpleNamespace

from referral_engine.referrals.service import ReferralActivation
from referral_engine.services import referral_events

UTC = timezone.utc
NOW_UTC = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


class _RecordingSessionLocal:
    def __init__(self, events: list[str]) -> None:
        self.events = events

    @asynccontextmanager
    async def begin(self):
        self.events.append("begin")
        yield SimpleNamespace()
        self.events.append("commit")


def test_on_first_session_completed_notifies_after_commit(monkeypatch) -> None:
    events: list[str] = []
    reward = SimpleNamespace(id=30, advocate_id=5, referral_id=12)

    async def fake_activate(session, *, invitee_profile_id, now_utc, on_reward_issued):
        assert now_utc == NOW_UTC
        await on_reward_issued(reward)
        events.append("activated")
        return ReferralActivation(referral_id=12, referrer_id=5, status="activated", reward_id=30)

    def fake_emit(issued_reward) -> bool:
        events.append(f"notify:{issued_reward.id}")
        return True

    monkeypatch.setattr(referral_events, "SessionLocal", _RecordingSessionLocal(events))
    monkeypatch.setattr(referral_events.ReferralService, "activate_referral", fake_activate)
    monkeypatch.setattr(referral_events, "emit_referral_reward_notification", fake_emit)

    activation = asyncio.run(
        referral_events.on_first_session_completed(invitee_profile_id=3, now_utc=NOW_UTC)
    )

    assert activation is not None
    assert activation.reward_id == 30
    assert events == ["begin", "activated", "commit", "notify:30"]


def test_on_first_session_completed_without_reward_sends_nothing(monkeypatch) -> None:
    events: list[str] = []

    async def fake_activate(session, *, invitee_profile_id, now_utc, on_reward_issued):
        return None

    def fake_emit(issued_reward) -> bool:
        raise AssertionError("no notification expected")

    monkeypatch.setattr(referral_events, "SessionLocal", _RecordingSessionLocal(events))
    monkeypatch.setattr(referral_events.ReferralService, "activate_referral", fake_activate)
    monkeypatch.setattr(referral_events, "emit_referral_reward_notification", fake_emit)

    assert asyncio.run(referral_events.on_first_session_completed(invitee_profile_id=3)) is None
    assert events == ["begin", "commit"]
