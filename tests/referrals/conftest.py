from __future__ import annotations

import pytest

from tests.referrals.referral_fakes import FakeReferralStore, FakeSession, install_fake_store


@pytest.fixture
def store(monkeypatch) -> FakeReferralStore:
    fake_store = FakeReferralStore()
    install_fake_store(monkeypatch, fake_store)
    return fake_store


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
