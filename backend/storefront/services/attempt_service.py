# Overview: Payment attempt ledger and the security policy gate that stamps new attempts.

"""
Payment Attempt Service

WHY: Every checkout submission produces exactly one PaymentAttempt row. The
row is stamped with a deterministic initial status chosen by payment method
before any human sees it, and it is never deleted.

SECURITY POLICY (default):
- card   -> pending_rejection  (denied unless an admin manually overrides)
- paypal -> pending_review
- crypto -> pending_review
- bank   -> pending_review

The policy comes from app.config["PAYMENT_POLICY"] and is validated when the
app starts (see validate_payment_policy).

DUPLICATES:
- An order with an approved attempt (verified / manually_approved) accepts no
  further attempts.
- An order accepts at most one undecided attempt per method.
- Concurrent submissions for one order serialize on a guarded UPDATE of the
  order row; a submission that loses the race gets ConcurrencyConflict.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Order, PaymentAttempt
from ..order_status import REGISTRY
from ..time_utils import utcnow
from ..validation import (
    ConcurrencyConflict,
    ConflictError,
    DuplicateAttempt,
    NotFoundError,
    ValidationError,
    PAYMENT_METHODS,
    coerce_amount_cents,
    normalize_currency,
    validate_method,
    validate_method_payload,
)
from .concurrency import compare_and_swap, lock_for_update, run_with_retry
from .ledger_service import append_attempt_event, get_attempt_events, EVENT_CREATED


# =============================================================================
# ATTEMPT STATUS (CONSTANTS)
# =============================================================================

STATUS_PENDING_REVIEW = "pending_review"
STATUS_PENDING_REJECTION = "pending_rejection"
STATUS_VERIFIED = "verified"
STATUS_MANUALLY_APPROVED = "manually_approved"
STATUS_REJECTED = "rejected"

UNDECIDED_STATUSES = (STATUS_PENDING_REVIEW, STATUS_PENDING_REJECTION)
APPROVED_STATUSES = (STATUS_VERIFIED, STATUS_MANUALLY_APPROVED)
ATTEMPT_STATUSES = UNDECIDED_STATUSES + APPROVED_STATUSES + (STATUS_REJECTED,)

# Dashboard buckets
STATUS_BUCKETS = {
    "all": ATTEMPT_STATUSES,
    "pending": UNDECIDED_STATUSES,
    "approved": APPROVED_STATUSES,
    "rejected": (STATUS_REJECTED,),
}


# =============================================================================
# SECURITY POLICY GATE
# =============================================================================

def validate_payment_policy(policy: Mapping[str, str]) -> dict[str, str]:
    """
    Check that the policy covers every method and only stamps undecided statuses.

    Raises:
        ValueError: If the policy is incomplete or stamps a decided status
    """
    missing = [m for m in PAYMENT_METHODS if m not in policy]
    if missing:
        raise ValueError(f"PAYMENT_POLICY is missing methods: {', '.join(missing)}")
    unknown = [m for m in policy if m not in PAYMENT_METHODS]
    if unknown:
        raise ValueError(f"PAYMENT_POLICY has unknown methods: {', '.join(unknown)}")
    for method, status in policy.items():
        if status not in UNDECIDED_STATUSES:
            raise ValueError(
                f"PAYMENT_POLICY[{method!r}] = {status!r}; initial status must be one of "
                f"{', '.join(UNDECIDED_STATUSES)}"
            )
    return dict(policy)


def resolve_initial_status(method: str, policy: Mapping[str, str] | None = None) -> str:
    """Deterministic initial status for a new attempt of `method`."""
    if policy is None:
        policy = current_app.config["PAYMENT_POLICY"]
    return policy[method]


def _reject_duplicates(order_id: int, method: str) -> None:
    approved = (
        db.session.query(PaymentAttempt)
        .filter(
            PaymentAttempt.order_id == order_id,
            PaymentAttempt.status.in_(APPROVED_STATUSES),
        )
        .first()
    )
    if approved:
        raise DuplicateAttempt(
            f"Order {order_id} already has an approved payment attempt ({approved.id})"
        )

    undecided = (
        db.session.query(PaymentAttempt)
        .filter(
            PaymentAttempt.order_id == order_id,
            PaymentAttempt.method == method,
            PaymentAttempt.status.in_(UNDECIDED_STATUSES),
        )
        .first()
    )
    if undecided:
        raise DuplicateAttempt(
            f"Order {order_id} already has an undecided {method} attempt ({undecided.id})"
        )


def create_attempt(
    *,
    order_id: int,
    method: str,
    amount_cents: Any,
    method_payload: dict | None,
    currency: str | None = None,
    customer_id: str | None = None,
) -> PaymentAttempt:
    """
    Record a checkout submission as a stamped PaymentAttempt.

    Args:
        order_id: Order being paid
        method: card, paypal, crypto or bank
        amount_cents: Positive integer amount
        method_payload: Evidence produced by the gateway adapter for `method`
        currency: 3-letter code (defaults to the order's currency)
        customer_id: Must match the order's customer when given

    Returns:
        The persisted attempt (status pending_review or pending_rejection)

    Raises:
        ValidationError: Invalid amount, method, currency or payload
        NotFoundError: Order does not exist
        ConflictError: Order is in a terminal status
        DuplicateAttempt: Order already paid, or undecided attempt for same method
        ConcurrencyConflict: Another attempt for the order was submitted concurrently
    """
    def _op():
        method_norm = validate_method(method)
        amount = coerce_amount_cents(amount_cents)
        payload = validate_method_payload(method_norm, method_payload)

        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise NotFoundError(f"Order {order_id} not found")

        if customer_id is not None and str(customer_id) != order.customer_id:
            raise ValidationError(f"customer_id does not match order {order_id}")

        if REGISTRY.is_terminal(order.current_status):
            raise ConflictError(
                f"Order {order_id} is {order.current_status}; it cannot accept payment attempts"
            )

        attempt_currency = normalize_currency(currency) if currency is not None else order.currency

        # Claim the order row before the duplicate checks. Concurrent checkouts
        # for the same order serialize on this UPDATE; a loser finds the active
        # attempt link moved and must reload.
        linked_id = order.payment_attempt_id
        link_unchanged = (
            Order.payment_attempt_id.is_(None)
            if linked_id is None
            else Order.payment_attempt_id == linked_id
        )
        claim = (
            update(Order)
            .where(Order.id == order_id, link_unchanged)
            .values(payment_attempt_id=Order.payment_attempt_id)
            .execution_options(synchronize_session=False)
        )
        if not compare_and_swap(claim):
            db.session.rollback()
            raise ConcurrencyConflict(
                f"Order {order_id} received another payment attempt concurrently; reload and retry"
            )

        try:
            _reject_duplicates(order_id, method_norm)
        except DuplicateAttempt:
            db.session.rollback()
            raise

        status = resolve_initial_status(method_norm)
        now = utcnow()

        attempt = PaymentAttempt(
            order_id=order_id,
            customer_id=order.customer_id,
            method=method_norm,
            amount_cents=amount,
            currency=attempt_currency,
            method_payload=json.dumps(payload, sort_keys=True),
            status=status,
            created_at=now,
            manual_override=False,
        )
        db.session.add(attempt)
        db.session.flush()

        order.payment_attempt_id = attempt.id

        append_attempt_event(
            attempt_id=attempt.id,
            order_id=order_id,
            event_type=EVENT_CREATED,
            actor_id=order.customer_id,
            to_status=status,
            occurred_at=now,
        )

        db.session.commit()

        current_app.logger.info(
            "Payment attempt %s created for order %s (method=%s, status=%s)",
            attempt.id, order_id, method_norm, status,
        )
        return attempt

    return run_with_retry(_op)


# =============================================================================
# LEDGER QUERIES
# =============================================================================

def get_attempt(attempt_id: int) -> PaymentAttempt:
    attempt = db.session.get(PaymentAttempt, attempt_id)
    if attempt is None:
        raise NotFoundError(f"Payment attempt {attempt_id} not found")
    return attempt


def get_attempt_detail(attempt_id: int) -> dict:
    """Attempt plus its audit trail, oldest event first."""
    attempt = get_attempt(attempt_id)
    return {
        "attempt": attempt.to_dict(),
        "events": [e.to_dict() for e in get_attempt_events(attempt_id)],
    }


def get_order_attempts(order_id: int) -> list[PaymentAttempt]:
    return (
        db.session.query(PaymentAttempt)
        .filter_by(order_id=order_id)
        .order_by(PaymentAttempt.created_at, PaymentAttempt.id)
        .all()
    )
