from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.db.models.base import Base


class ReferralHandle(Base):
    """Append-only registry of every handle ever issued; rows are never deleted."""

    __tablename__ = "referral_handles"

    handle: Mapped[str] = mapped_column(String(40), primary_key=True)
    advocate_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
