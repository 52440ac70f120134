# Overview: Order lifecycle operations driven by the order status registry.

"""
Order Service

================================================================================
PURPOSE: The only writer of Order.current_status
================================================================================

Every status change goes through _apply_transition:

1. The target must be an edge of the status graph from the current status
   (REGISTRY.require_transition). Otherwise InvalidTransition is raised and
   nothing is written.
2. The UPDATE is a compare-and-swap on (current_status, version_id). If another
   writer moved the order first, ConcurrencyConflict is raised (retryable).
3. A history row (from, to, actor, note, occurred_at) is appended in the same
   transaction.

Callers that need the change committed together with other writes (payment
approval) call _apply_transition and commit themselves.
"""

from __future__ import annotations

from typing import Any, Iterable

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Order, OrderStatusHistory
from ..order_status import REGISTRY, OrderStatus, get_next_statuses, legacy_to_detailed
from ..time_utils import utcnow
from ..validation import (
    ConcurrencyConflict,
    NotFoundError,
    UnknownStatusCode,
    ValidationError,
    coerce_amount_cents,
    normalize_currency,
    require_text,
)
from .concurrency import compare_and_swap, run_with_retry
from .ledger_service import append_status_history
from . import ledger_service


def _clean_note(note: Any) -> str | None:
    if note is None:
        return None
    if not isinstance(note, str):
        raise ValidationError("note must be a string")
    note = note.strip()
    if len(note) > 255:
        raise ValidationError("note exceeds max length 255")
    return note or None


def _coerce_version(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("version_id must be an integer")
    return value


def _insert_order(
    *,
    customer_id: Any,
    amount_cents: Any,
    currency: Any,
    status: OrderStatus,
    actor_id: str | None,
    note: str | None,
) -> Order:
    order = Order(
        customer_id=require_text(customer_id, "customer_id", max_length=64),
        amount_cents=coerce_amount_cents(amount_cents),
        currency=normalize_currency(currency),
        current_status=status.value,
        version_id=1,
        created_at=utcnow(),
    )
    db.session.add(order)
    db.session.flush()

    append_status_history(
        order_id=order.id,
        from_status=None,
        to_status=status.value,
        actor_id=actor_id,
        note=note,
        occurred_at=order.created_at,
    )
    return order


def create_order(
    *,
    customer_id: Any,
    amount_cents: Any,
    currency: Any = None,
    actor_id: str | None = None,
    note: str | None = None,
) -> Order:
    """Create an order at ORDER_RECEIVED and record it as the first history row."""
    def _op():
        order = _insert_order(
            customer_id=customer_id,
            amount_cents=amount_cents,
            currency=currency,
            status=OrderStatus.ORDER_RECEIVED,
            actor_id=actor_id,
            note=_clean_note(note),
        )
        db.session.commit()
        current_app.logger.info("Order %s created for customer %s", order.id, order.customer_id)
        return order

    return run_with_retry(_op)


def seed_order_from_legacy(
    *,
    legacy_status: Any,
    customer_id: Any,
    amount_cents: Any,
    currency: Any = None,
    actor_id: str | None = None,
) -> Order:
    """
    Import an order that only carries a legacy status.

    The order starts at the canonical detailed code for that legacy value.
    This is the only place legacy values are turned into detailed codes;
    forward transitions always use the detailed graph.

    Raises:
        UnknownStatusCode: legacy_status is not one of the 8 legacy values
    """
    status = legacy_to_detailed(legacy_status)

    def _op():
        order = _insert_order(
            customer_id=customer_id,
            amount_cents=amount_cents,
            currency=currency,
            status=status,
            actor_id=actor_id,
            note=f"Imported from legacy status '{REGISTRY.parse_legacy(legacy_status).value}'",
        )
        db.session.commit()
        current_app.logger.info(
            "Order %s imported at %s from legacy status %s", order.id, status.value, legacy_status
        )
        return order

    return run_with_retry(_op)


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _apply_transition(
    order: Order,
    to_status: Any,
    *,
    actor_id: str | None = None,
    note: str | None = None,
    expected_version: int | None = None,
    extra_values: dict | None = None,
) -> OrderStatusHistory:
    """
    Move `order` along one edge inside the current transaction (no commit).

    Raises:
        UnknownStatusCode: to_status is not registered
        InvalidTransition: to_status is not reachable from the current status
        ConcurrencyConflict: status or version changed since `order` was read
    """
    if expected_version is not None and expected_version != order.version_id:
        raise ConcurrencyConflict(
            f"Order {order.id} is at version {order.version_id}, not {expected_version}; reload and retry"
        )

    source = REGISTRY.parse(order.current_status)
    target = REGISTRY.require_transition(source, to_status)

    version = order.version_id
    now = utcnow()

    stmt = (
        update(Order)
        .where(
            Order.id == order.id,
            Order.current_status == source.value,
            Order.version_id == version,
        )
        .values(
            current_status=target.value,
            version_id=version + 1,
            updated_at=now,
            **(extra_values or {}),
        )
        .execution_options(synchronize_session=False)
    )
    if not compare_and_swap(stmt):
        raise ConcurrencyConflict(
            f"Order {order.id} changed concurrently (expected {source.value} at version {version}); reload and retry"
        )
    db.session.expire(order)

    return append_status_history(
        order_id=order.id,
        from_status=source.value,
        to_status=target.value,
        actor_id=actor_id,
        note=note,
        occurred_at=now,
    )


def advance_status(
    order_id: int,
    to_status: Any,
    *,
    actor_id: str | None = None,
    note: Any = None,
    expected_version: Any = None,
) -> Order:
    """
    Move an order to `to_status` if the status graph allows it.

    Args:
        order_id: Order to advance
        to_status: Registered status code
        actor_id: Who requested the change (stored in history)
        note: Optional free text (max 255)
        expected_version: If given, the change only applies at that version_id

    Returns:
        The updated order

    Raises:
        NotFoundError, UnknownStatusCode, InvalidTransition, ConcurrencyConflict
    """
    note = _clean_note(note)
    expected_version = _coerce_version(expected_version)

    def _op():
        order = get_order(order_id)
        try:
            row = _apply_transition(
                order,
                to_status,
                actor_id=actor_id,
                note=note,
                expected_version=expected_version,
            )
        except Exception:
            db.session.rollback()
            raise
        db.session.commit()
        current_app.logger.info(
            "Order %s: %s -> %s (actor=%s)", order_id, row.from_status, row.to_status, actor_id
        )
        return order

    return run_with_retry(_op)


def cancel_order(
    order_id: int,
    *,
    actor_id: str | None = None,
    reason: Any = None,
    expected_version: Any = None,
) -> Order:
    """Shortcut for advance_status(..., CANCELLED); legal only where the graph has that edge."""
    return advance_status(
        order_id,
        OrderStatus.CANCELLED,
        actor_id=actor_id,
        note=reason,
        expected_version=expected_version,
    )


def get_status_history(order_id: int) -> list[OrderStatusHistory]:
    get_order(order_id)
    return ledger_service.get_status_history(order_id)


def history_is_valid_walk(rows: Iterable[OrderStatusHistory]) -> bool:
    """
    True when each history row continues from the previous one along a graph edge.

    The first row must have no from_status; later rows must start where the
    previous one ended. A row naming an unregistered code makes the walk invalid.
    """
    previous = None
    for row in rows:
        try:
            REGISTRY.parse(row.to_status)
        except UnknownStatusCode:
            return False
        if previous is None:
            if row.from_status is not None:
                return False
        else:
            if row.from_status != previous:
                return False
            if not REGISTRY.can_transition(row.from_status, row.to_status):
                return False
        previous = row.to_status
    return True


def get_tracking(order_id: int) -> dict:
    """Tracking view: detailed status, legacy status, milestone and next steps."""
    order = get_order(order_id)
    definition = REGISTRY.definition(order.current_status)
    return {
        "order": order.to_dict(),
        "status": definition.to_dict(),
        "legacy_status": REGISTRY.to_legacy(definition.code).value,
        "is_terminal": REGISTRY.is_terminal(definition.code),
        "next_statuses": [s.value for s in get_next_statuses(definition.code)],
    }
