# backend/storefront/config.py
from __future__ import annotations
import os


# Initial status stamped on a new attempt, per payment method.
# Card attempts are denied-by-policy until an admin overrides them.
DEFAULT_PAYMENT_POLICY = {
    "card": "pending_rejection",
    "paypal": "pending_review",
    "crypto": "pending_review",
    "bank": "pending_review",
}


def _payment_policy_from_env() -> dict[str, str]:
    policy = dict(DEFAULT_PAYMENT_POLICY)
    card_override = os.environ.get("CARD_DEFAULT_STATUS")
    if card_override:
        policy["card"] = card_override.strip().lower()
    return policy


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///storefront.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # SQLite: wait for a competing writer instead of failing immediately
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 15}} if SQLALCHEMY_DATABASE_URI.startswith("sqlite") else {}

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    PAYMENT_POLICY = _payment_policy_from_env()

    VERIFICATION_QUEUE_PAGE_SIZE = int(os.environ.get("VERIFICATION_QUEUE_PAGE_SIZE", "25"))
    VERIFICATION_QUEUE_MAX_PAGE_SIZE = int(os.environ.get("VERIFICATION_QUEUE_MAX_PAGE_SIZE", "100"))

    # Used by `flask payments sweep-stale`
    STALE_ATTEMPT_HOURS = int(os.environ.get("STALE_ATTEMPT_HOURS", "72"))
    SYSTEM_REVIEWER_ID = os.environ.get("SYSTEM_REVIEWER_ID", "system")
