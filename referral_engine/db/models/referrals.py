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
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.db.models.base import Base


class Referral(Base):
    __tablename__ = "referrals"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','signed_up','activated','flagged')",
            name="status",
        ),
        CheckConstraint(
            "(status = 'activated') = (activated_at IS NOT NULL)",
            name="activated_at_matches_status",
        ),
        CheckConstraint(
            "status <> 'flagged' OR (fraud_flags IS NOT NULL AND jsonb_array_length(fraud_flags) > 0)",
            name="flagged_has_fraud_flags",
        ),
        CheckConstraint(
            "status <> 'activated' OR fraud_flags IS NULL OR jsonb_array_length(fraud_flags) = 0",
            name="activated_without_fraud_flags",
        ),
        CheckConstraint(
            "status = 'pending' OR (invitee_user_id IS NOT NULL AND signed_up_at IS NOT NULL)",
            name="claimed_has_invitee",
        ),
        Index("idx_referrals_referrer_created", "referrer_id", "created_at"),
        Index("idx_referrals_invitee_profile", "invitee_profile_id"),
        Index("idx_referrals_status_expires", "status", "expires_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    referrer_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("advocates.id"),
        nullable=False,
    )
    invitee_user_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        unique=True,
        nullable=True,
    )
    invitee_profile_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("advocates.id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    signed_up_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    university_domain_match: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("false"),
    )
    fraud_flags: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
