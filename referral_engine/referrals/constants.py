from __future__ import annotations

from datetime import timedelta

VELOCITY_CAP_WEEKLY = 10
VELOCITY_WINDOW = timedelta(days=7)

REWARD_CAP_MONTHLY = 5
# Declared for reporting only; issuance never checks it.
REWARD_CAP_TERM = 15

DORMANT_INVITE_EXPIRY = timedelta(days=30)

STATUS_PENDING = "pending"
STATUS_SIGNED_UP = "signed_up"
STATUS_ACTIVATED = "activated"
STATUS_FLAGGED = "flagged"
STATUS_EXPIRED = "expired"
EXPIRABLE_STATUSES = frozenset({STATUS_PENDING, STATUS_SIGNED_UP})

FRAUD_FLAG_SELF_REFERRAL = "self_referral"

REWARD_TYPE_AI_SESSION = "ai_session"
REWARD_TYPES = frozenset({REWARD_TYPE_AI_SESSION})

ACTIVITY_FEED_LIMIT = 20
ACTIVITY_PENDING_DISPLAY_NAME = "Pending"

NOTIFICATION_TYPE_REFERRAL_ACTIVATED = "referral_activated"
NOTIFICATION_TITLE_REFERRAL_ACTIVATED = "Your referral has joined the Bar"
NOTIFICATION_BODY_REFERRAL_ACTIVATED = (
    "An advocate you invited has completed their first session. You have earned a reward."
)
