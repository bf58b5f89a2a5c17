from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from referral_engine.db.models.base import Base


class Advocate(Base):
    __tablename__ = "advocates"
    __table_args__ = (
        Index("idx_advocates_referred_by", "referred_by_advocate_id"),
        Index("idx_advocates_university", "university"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    university: Mapped[str | None] = mapped_column(Text, nullable=True)
    university_short: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("true"),
    )
    handle: Mapped[str | None] = mapped_column(String(40), unique=True, nullable=True)
    referral_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("0"),
    )
    referred_by_advocate_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("advocates.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
