from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.db.models.base import Base


class ReferralReward(Base):
    __tablename__ = "referral_rewards"
    __table_args__ = (
        CheckConstraint("reward_type IN ('ai_session')", name="reward_type"),
        CheckConstraint("NOT (redeemed AND revoked)", name="redeemed_xor_revoked"),
        CheckConstraint("redeemed = (redeemed_at IS NOT NULL)", name="redeemed_at_matches_flag"),
        Index("idx_referral_rewards_advocate_earned", "advocate_id", "earned_at"),
        Index("idx_referral_rewards_advocate_type", "advocate_id", "reward_type"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    advocate_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("advocates.id"),
        nullable=False,
    )
    referral_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("referrals.id"),
        unique=True,
        nullable=False,
    )
    reward_type: Mapped[str] = mapped_column(String(32), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    redeemed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    redeemed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    revoked_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
