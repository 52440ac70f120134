from __future__ import annotations

import json

from ..extensions import db
from ..time_utils import to_utc_z


class PaymentAttempt(db.Model):
    """
    One submission of payment evidence for one order and one method.

    STATUSES:
    - pending_review:    neutral, awaiting an admin decision
    - pending_rejection: denied by policy unless an admin overrides it
    - verified:          approved (non-card methods)
    - manually_approved: approved card attempt (manual_override = True)
    - rejected:          rejected by an admin or the stale sweep

    The decision fields (status, reviewed_by, reviewed_at, rejection_reason,
    manual_override) are written once, by a compare-and-swap on status.
    Rows are never deleted.
    """
    __tablename__ = "payment_attempts"
    __table_args__ = (
        db.Index("ix_payment_attempts_order_status", "order_id", "status"),
        db.Index("ix_payment_attempts_status_created", "status", "created_at"),
        db.CheckConstraint("amount_cents > 0", name="ck_payment_attempts_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    customer_id = db.Column(db.String(64), nullable=False, index=True)

    method = db.Column(db.String(16), nullable=False, index=True)  # card, paypal, crypto, bank
    amount_cents = db.Column(db.Integer, nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="USD")

    # Method-specific evidence (JSON); validated for presence, not authenticity
    method_payload = db.Column(db.Text, nullable=False, default="{}")

    status = db.Column(db.String(32), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    # Decision (write-once)
    reviewed_by = db.Column(db.String(64), nullable=True)
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejection_reason = db.Column(db.String(255), nullable=True)
    manual_override = db.Column(db.Boolean, nullable=False, default=False)

    admin_notes = db.Column(db.Text, nullable=True)

    order = db.relationship("Order", backref=db.backref("payment_attempts", lazy=True))

    @property
    def payload(self) -> dict:
        return json.loads(self.method_payload or "{}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "method": self.method,
            "amount_cents": self.amount_cents,
            "currency": self.currency,
            "method_payload": self.payload,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "reviewed_by": self.reviewed_by,
            "reviewed_at": to_utc_z(self.reviewed_at),
            "rejection_reason": self.rejection_reason,
            "admin_notes": self.admin_notes,
            "manual_override": self.manual_override,
        }


class PaymentAttemptEvent(db.Model):
    """
    Append-only audit trail for payment attempts.

    EVENT TYPES:
    - CREATED:    attempt stamped by the security policy gate
    - APPROVED:   verified / manually_approved
    - REJECTED:   rejected (reason in note)
    - NOTE_ADDED: admin note, status unchanged

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "payment_attempt_events"
    __table_args__ = (
        db.Index("ix_payment_attempt_events_attempt_occurred", "attempt_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("payment_attempts.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    event_type = db.Column(db.String(16), nullable=False, index=True)
    actor_id = db.Column(db.String(64), nullable=True)

    from_status = db.Column(db.String(32), nullable=True)
    to_status = db.Column(db.String(32), nullable=True)
    note = db.Column(db.Text, nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    attempt = db.relationship("PaymentAttempt", backref=db.backref("events", lazy=True, order_by="PaymentAttemptEvent.id"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "order_id": self.order_id,
            "event_type": self.event_type,
            "actor_id": self.actor_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }
