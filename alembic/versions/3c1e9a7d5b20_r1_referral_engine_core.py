"""r1_referral_engine_core

Revision ID: 3c1e9a7d5b20
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3c1e9a7d5b20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "advocates",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("university", sa.Text(), nullable=True),
        sa.Column("university_short", sa.String(32), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("handle", sa.String(40), nullable=True),
        sa.Column("referral_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("referred_by_advocate_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_advocates_user_id_users"),
        sa.ForeignKeyConstraint(
            ["referred_by_advocate_id"],
            ["advocates.id"],
            name="fk_advocates_referred_by_advocate_id_advocates",
        ),
        sa.UniqueConstraint("user_id", name="uq_advocates_user_id"),
        sa.UniqueConstraint("handle", name="uq_advocates_handle"),
    )
    op.create_index("idx_advocates_referred_by", "advocates", ["referred_by_advocate_id"])
    op.create_index("idx_advocates_university", "advocates", ["university"])

    op.create_table(
        "referral_handles",
        sa.Column("handle", sa.String(40), primary_key=True),
        sa.Column("advocate_id", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("advocate_id", name="uq_referral_handles_advocate_id"),
    )

    op.create_table(
        "referrals",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("referrer_id", sa.BigInteger(), nullable=False),
        sa.Column("invitee_user_id", sa.BigInteger(), nullable=True),
        sa.Column("invitee_profile_id", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("signed_up_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "university_domain_match",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("fraud_flags", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending','signed_up','activated','flagged')",
            name="ck_referrals_status",
        ),
        sa.CheckConstraint(
            "(status = 'activated') = (activated_at IS NOT NULL)",
            name="ck_referrals_activated_at_matches_status",
        ),
        sa.CheckConstraint(
            "status <> 'flagged' OR (fraud_flags IS NOT NULL AND jsonb_array_length(fraud_flags) > 0)",
            name="ck_referrals_flagged_has_fraud_flags",
        ),
        sa.CheckConstraint(
            "status <> 'activated' OR fraud_flags IS NULL OR jsonb_array_length(fraud_flags) = 0",
            name="ck_referrals_activated_without_fraud_flags",
        ),
        sa.CheckConstraint(
            "status = 'pending' OR (invitee_user_id IS NOT NULL AND signed_up_at IS NOT NULL)",
            name="ck_referrals_claimed_has_invitee",
        ),
        sa.ForeignKeyConstraint(["referrer_id"], ["advocates.id"], name="fk_referrals_referrer_id_advocates"),
        sa.ForeignKeyConstraint(["invitee_user_id"], ["users.id"], name="fk_referrals_invitee_user_id_users"),
        sa.ForeignKeyConstraint(
            ["invitee_profile_id"],
            ["advocates.id"],
            name="fk_referrals_invitee_profile_id_advocates",
        ),
        sa.UniqueConstraint("invitee_user_id", name="uq_referrals_invitee_user_id"),
    )
    op.create_index("idx_referrals_referrer_created", "referrals", ["referrer_id", "created_at"])
    op.create_index("idx_referrals_invitee_profile", "referrals", ["invitee_profile_id"])
    op.create_index("idx_referrals_status_expires", "referrals", ["status", "expires_at"])

    op.create_table(
        "referral_rewards",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("advocate_id", sa.BigInteger(), nullable=False),
        sa.Column("referral_id", sa.BigInteger(), nullable=False),
        sa.Column("reward_type", sa.String(32), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("redeemed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("revoked_reason", sa.Text(), nullable=True),
        sa.CheckConstraint("reward_type IN ('ai_session')", name="ck_referral_rewards_reward_type"),
        sa.CheckConstraint("NOT (redeemed AND revoked)", name="ck_referral_rewards_redeemed_xor_revoked"),
        sa.CheckConstraint(
            "redeemed = (redeemed_at IS NOT NULL)",
            name="ck_referral_rewards_redeemed_at_matches_flag",
        ),
        sa.ForeignKeyConstraint(
            ["advocate_id"],
            ["advocates.id"],
            name="fk_referral_rewards_advocate_id_advocates",
        ),
        sa.ForeignKeyConstraint(
            ["referral_id"],
            ["referrals.id"],
            name="fk_referral_rewards_referral_id_referrals",
        ),
        sa.UniqueConstraint("referral_id", name="uq_referral_rewards_referral_id"),
    )
    op.create_index(
        "idx_referral_rewards_advocate_earned",
        "referral_rewards",
        ["advocate_id", "earned_at"],
    )
    op.create_index(
        "idx_referral_rewards_advocate_type",
        "referral_rewards",
        ["advocate_id", "reward_type"],
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("advocate_id", sa.BigInteger(), nullable=False),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(
            ["advocate_id"],
            ["advocates.id"],
            name="fk_notifications_advocate_id_advocates",
        ),
    )
    op.create_index(
        "idx_notifications_advocate_created",
        "notifications",
        ["advocate_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_notifications_advocate_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_referral_rewards_advocate_type", table_name="referral_rewards")
    op.drop_index("idx_referral_rewards_advocate_earned", table_name="referral_rewards")
    op.drop_table("referral_rewards")
    op.drop_index("idx_referrals_status_expires", table_name="referrals")
    op.drop_index("idx_referrals_invitee_profile", table_name="referrals")
    op.drop_index("idx_referrals_referrer_created", table_name="referrals")
    op.drop_table("referrals")
    op.drop_table("referral_handles")
    op.drop_index("idx_advocates_university", table_name="advocates")
    op.drop_index("idx_advocates_referred_by", table_name="advocates")
    op.drop_table("advocates")
    op.drop_table("users")
