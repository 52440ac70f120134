# Overview: Review decisions on payment attempts (approve, reject, notes, stale sweep).

"""
Review Decision Engine

WHY: Two admins can open the same attempt and click at the same time. A
decision is applied exactly once: the UPDATE is guarded by the undecided
statuses in its WHERE clause, and whoever matches zero rows lost the race and
gets AlreadyDecided with the winner's decision.

APPROVE:
- card   -> manually_approved, manual_override = True
- others -> verified
- The linked order moves ORDER_RECEIVED -> PAYMENT_AUTHORIZED in the same
  transaction. If that move is not legal the whole approval is rolled back.

REJECT:
- reason is required
- order status is untouched; the order's active attempt link is cleared
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Order, PaymentAttempt
from ..order_status import OrderStatus
from ..time_utils import utcnow
from ..validation import AlreadyDecided, DuplicateAttempt, NotFoundError, ValidationError, require_text
from .attempt_service import (
    APPROVED_STATUSES,
    STATUS_MANUALLY_APPROVED,
    STATUS_REJECTED,
    STATUS_VERIFIED,
    UNDECIDED_STATUSES,
)
from .concurrency import compare_and_swap, run_with_retry
from .ledger_service import append_attempt_event, EVENT_APPROVED, EVENT_NOTE_ADDED, EVENT_REJECTED
from . import order_service


def _load_undecided(attempt_id: int) -> PaymentAttempt:
    attempt = db.session.get(PaymentAttempt, attempt_id)
    if attempt is None:
        raise NotFoundError(f"Payment attempt {attempt_id} not found")
    if attempt.status not in UNDECIDED_STATUSES:
        raise AlreadyDecided(attempt.id, attempt.status, attempt.reviewed_by)
    return attempt


def _claim_decision(attempt: PaymentAttempt, **values) -> None:
    """
    Write the decision fields if the attempt is still undecided.

    On a lost race the transaction is rolled back and AlreadyDecided carries
    the decision that won.
    """
    stmt = (
        update(PaymentAttempt)
        .where(
            PaymentAttempt.id == attempt.id,
            PaymentAttempt.status.in_(UNDECIDED_STATUSES),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if not compare_and_swap(stmt):
        db.session.rollback()
        db.session.expire(attempt)
        raise AlreadyDecided(attempt.id, attempt.status, attempt.reviewed_by)
    db.session.expire(attempt)


def approve(attempt_id: int, reviewer_id: Any, *, note: Any = None) -> PaymentAttempt:
    """
    Approve an undecided attempt and authorize its order.

    Raises:
        NotFoundError: attempt does not exist
        AlreadyDecided: attempt was approved or rejected before
        DuplicateAttempt: another attempt of the same order is already approved
        InvalidTransition: the order cannot move to PAYMENT_AUTHORIZED
        ConcurrencyConflict: the order changed while approving
    """
    reviewer = require_text(reviewer_id, "reviewer_id", max_length=64)

    def _op():
        attempt = _load_undecided(attempt_id)

        other = (
            db.session.query(PaymentAttempt.id)
            .filter(
                PaymentAttempt.order_id == attempt.order_id,
                PaymentAttempt.id != attempt.id,
                PaymentAttempt.status.in_(APPROVED_STATUSES),
            )
            .first()
        )
        if other:
            raise DuplicateAttempt(
                f"Order {attempt.order_id} already has an approved payment attempt ({other.id})"
            )

        order = db.session.get(Order, attempt.order_id)
        if order is None:
            raise NotFoundError(f"Order {attempt.order_id} not found")

        is_card = attempt.method == "card"
        new_status = STATUS_MANUALLY_APPROVED if is_card else STATUS_VERIFIED
        from_status = attempt.status
        now = utcnow()

        _claim_decision(
            attempt,
            status=new_status,
            reviewed_by=reviewer,
            reviewed_at=now,
            manual_override=is_card,
        )

        try:
            order_service._apply_transition(
                order,
                OrderStatus.PAYMENT_AUTHORIZED,
                actor_id=reviewer,
                note=f"Payment attempt {attempt_id} {new_status}",
                extra_values={"payment_attempt_id": attempt_id},
            )
            append_attempt_event(
                attempt_id=attempt_id,
                order_id=order.id,
                event_type=EVENT_APPROVED,
                actor_id=reviewer,
                from_status=from_status,
                to_status=new_status,
                note=note.strip() if isinstance(note, str) and note.strip() else None,
                occurred_at=now,
            )
        except Exception:
            db.session.rollback()
            raise

        db.session.commit()
        current_app.logger.info(
            "Payment attempt %s %s by %s (manual_override=%s); order %s authorized",
            attempt_id, new_status, reviewer, is_card, order.id,
        )
        return attempt

    return run_with_retry(_op)


def reject(attempt_id: int, reviewer_id: Any, reason: Any) -> PaymentAttempt:
    """
    Reject an undecided attempt. The order keeps its status.

    Raises:
        ValidationError: reason missing or blank
        NotFoundError: attempt does not exist
        AlreadyDecided: attempt was approved or rejected before
    """
    reviewer = require_text(reviewer_id, "reviewer_id", max_length=64)
    reason = require_text(reason, "reason", max_length=255)

    def _op():
        attempt = _load_undecided(attempt_id)
        from_status = attempt.status
        order_id = attempt.order_id
        now = utcnow()

        _claim_decision(
            attempt,
            status=STATUS_REJECTED,
            reviewed_by=reviewer,
            reviewed_at=now,
            rejection_reason=reason,
        )

        try:
            db.session.execute(
                update(Order)
                .where(Order.id == order_id, Order.payment_attempt_id == attempt_id)
                .values(payment_attempt_id=None)
                .execution_options(synchronize_session=False)
            )
            append_attempt_event(
                attempt_id=attempt_id,
                order_id=order_id,
                event_type=EVENT_REJECTED,
                actor_id=reviewer,
                from_status=from_status,
                to_status=STATUS_REJECTED,
                note=reason,
                occurred_at=now,
            )
        except Exception:
            db.session.rollback()
            raise

        db.session.commit()
        current_app.logger.info("Payment attempt %s rejected by %s: %s", attempt_id, reviewer, reason)
        return attempt

    return run_with_retry(_op)


def add_note(attempt_id: int, author_id: Any, note: Any) -> PaymentAttempt:
    """Append an admin note. Allowed on any attempt; never changes status."""
    author = require_text(author_id, "author_id", max_length=64)
    text = require_text(note, "note", max_length=2000)

    def _op():
        attempt = db.session.get(PaymentAttempt, attempt_id)
        if attempt is None:
            raise NotFoundError(f"Payment attempt {attempt_id} not found")

        line = f"[{author}] {text}"
        attempt.admin_notes = f"{attempt.admin_notes}\n{line}" if attempt.admin_notes else line

        append_attempt_event(
            attempt_id=attempt.id,
            order_id=attempt.order_id,
            event_type=EVENT_NOTE_ADDED,
            actor_id=author,
            note=text,
        )
        db.session.commit()
        return attempt

    return run_with_retry(_op)


def sweep_stale_attempts(*, older_than_hours: int, reviewer_id: str, now=None) -> dict:
    """
    Reject undecided attempts created more than `older_than_hours` ago.

    Each attempt goes through reject(), so an attempt decided by an admin in
    the meantime is skipped, never overwritten.

    Returns:
        {"rejected": [ids], "skipped": [ids], "cutoff": datetime}
    """
    if isinstance(older_than_hours, bool) or not isinstance(older_than_hours, int) or older_than_hours <= 0:
        raise ValidationError("older_than_hours must be a positive integer")

    cutoff = (now or utcnow()) - timedelta(hours=older_than_hours)
    stale_ids = [
        row.id
        for row in (
            db.session.query(PaymentAttempt.id)
            .filter(
                PaymentAttempt.status.in_(UNDECIDED_STATUSES),
                PaymentAttempt.created_at < cutoff,
            )
            .order_by(PaymentAttempt.created_at, PaymentAttempt.id)
            .all()
        )
    ]

    reason = f"Automatically rejected: undecided for more than {older_than_hours} hours"
    rejected, skipped = [], []
    for attempt_id in stale_ids:
        try:
            reject(attempt_id, reviewer_id, reason)
            rejected.append(attempt_id)
        except AlreadyDecided:
            skipped.append(attempt_id)

    current_app.logger.info(
        "Stale attempt sweep (cutoff %s): %d rejected, %d skipped", cutoff, len(rejected), len(skipped)
    )
    return {"rejected": rejected, "skipped": skipped, "cutoff": cutoff}
