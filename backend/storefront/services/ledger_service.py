# Overview: Append-only audit writers and readers for attempts and order status history.

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..extensions import db
from ..models import PaymentAttemptEvent, OrderStatusHistory
from ..time_utils import utcnow
"""
Audit trail invariants

- payment_attempt_events and order_status_history are append-only.
- Rows are written inside the same DB transaction as the change they record.
- No deletes/updates of existing rows; no business logic here.
"""


EVENT_CREATED = "CREATED"
EVENT_APPROVED = "APPROVED"
EVENT_REJECTED = "REJECTED"
EVENT_NOTE_ADDED = "NOTE_ADDED"


def append_attempt_event(
    *,
    attempt_id: int,
    order_id: int,
    event_type: str,
    actor_id: str | None = None,
    from_status: str | None = None,
    to_status: str | None = None,
    note: str | None = None,
    occurred_at: Optional[datetime] = None,
) -> PaymentAttemptEvent:
    ev = PaymentAttemptEvent(
        attempt_id=attempt_id,
        order_id=order_id,
        event_type=event_type,
        actor_id=actor_id,
        from_status=from_status,
        to_status=to_status,
        note=note,
        occurred_at=occurred_at or utcnow(),
    )
    db.session.add(ev)
    db.session.flush()
    return ev


def append_status_history(
    *,
    order_id: int,
    to_status: str,
    from_status: str | None = None,
    actor_id: str | None = None,
    note: str | None = None,
    occurred_at: Optional[datetime] = None,
) -> OrderStatusHistory:
    row = OrderStatusHistory(
        order_id=order_id,
        from_status=from_status,
        to_status=to_status,
        actor_id=actor_id,
        note=note,
        occurred_at=occurred_at or utcnow(),
    )
    db.session.add(row)
    db.session.flush()
    return row


def get_attempt_events(attempt_id: int) -> list[PaymentAttemptEvent]:
    return (
        db.session.query(PaymentAttemptEvent)
        .filter_by(attempt_id=attempt_id)
        .order_by(PaymentAttemptEvent.id)
        .all()
    )


def get_status_history(order_id: int) -> list[OrderStatusHistory]:
    return (
        db.session.query(OrderStatusHistory)
        .filter_by(order_id=order_id)
        .order_by(OrderStatusHistory.id)
        .all()
    )
