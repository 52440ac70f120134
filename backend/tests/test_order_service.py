"""
Order status state machine tests.

Verifies:
- advance_status only follows graph edges; failures write nothing
- status history is a valid walk of the graph
- version checks produce a retryable ConcurrencyConflict
- legacy seeding and the tracking view
"""

import pytest

from storefront.models import Order, OrderStatusHistory
from storefront.order_status import can_transition_to
from storefront.services import order_service
from storefront.validation import (
    ConcurrencyConflict,
    InvalidTransition,
    NotFoundError,
    UnknownStatusCode,
    ValidationError,
)


def _walk(order_id, *codes):
    for code in codes:
        order_service.advance_status(order_id, code, actor_id="ops")


class TestCreate:

    def test_order_starts_at_order_received(self, make_order):
        order = make_order()
        assert order.current_status == "ORDER_RECEIVED"
        assert order.version_id == 1
        assert order.payment_attempt_id is None

        history = order_service.get_status_history(order.id)
        assert len(history) == 1
        assert history[0].from_status is None
        assert history[0].to_status == "ORDER_RECEIVED"

    @pytest.mark.parametrize("kwargs", [
        {"customer_id": "", "amount_cents": 100},
        {"customer_id": "c1", "amount_cents": 0},
        {"customer_id": "c1", "amount_cents": 100, "currency": "EURO"},
    ])
    def test_invalid_input(self, db_session, kwargs):
        with pytest.raises(ValidationError):
            order_service.create_order(**kwargs)
        assert db_session.query(Order).count() == 0


class TestAdvance:

    def test_cannot_skip_payment_authorization(self, make_order, db_session):
        order = make_order()

        with pytest.raises(InvalidTransition):
            order_service.advance_status(order.id, "ORDER_VERIFIED", actor_id="ops")

        order = db_session.get(Order, order.id)
        assert order.current_status == "ORDER_RECEIVED"
        assert order.version_id == 1
        assert db_session.query(OrderStatusHistory).filter_by(order_id=order.id).count() == 1

    def test_advance_along_edge(self, make_order):
        order = make_order()
        updated = order_service.advance_status(order.id, "PAYMENT_AUTHORIZED", actor_id="ops", note="paid")

        assert updated.current_status == "PAYMENT_AUTHORIZED"
        assert updated.version_id == 2
        assert updated.updated_at is not None

        last = order_service.get_status_history(order.id)[-1]
        assert (last.from_status, last.to_status, last.actor_id, last.note) == (
            "ORDER_RECEIVED", "PAYMENT_AUTHORIZED", "ops", "paid",
        )

    def test_self_transition_is_invalid(self, make_order):
        order = make_order()
        with pytest.raises(InvalidTransition):
            order_service.advance_status(order.id, "ORDER_RECEIVED")

    def test_unknown_target(self, make_order):
        order = make_order()
        with pytest.raises(UnknownStatusCode):
            order_service.advance_status(order.id, "SHIPPED")

    def test_unknown_order(self, db_session):
        with pytest.raises(NotFoundError):
            order_service.advance_status(404, "PAYMENT_AUTHORIZED")

    def test_terminal_order_cannot_move(self, make_order):
        order = make_order()
        order_service.cancel_order(order.id, actor_id="cust-1", reason="changed mind")
        for target in ("ORDER_RECEIVED", "PAYMENT_AUTHORIZED", "RETURNED"):
            with pytest.raises(InvalidTransition):
                order_service.advance_status(order.id, target)

    def test_cancel_not_allowed_once_picking_started(self, make_order):
        order = make_order()
        _walk(order.id, "PAYMENT_AUTHORIZED", "ORDER_VERIFIED", "INVENTORY_ALLOCATED",
              "ORDER_PROCESSING", "PICKING_STARTED")
        with pytest.raises(InvalidTransition):
            order_service.cancel_order(order.id, actor_id="ops")

    def test_note_too_long(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            order_service.advance_status(order.id, "PAYMENT_AUTHORIZED", note="x" * 256)


class TestHistoryWalk:

    def test_full_delivery_with_detours_is_valid_walk(self, make_order, db_session):
        order = make_order()
        _walk(
            order.id,
            "PAYMENT_AUTHORIZED", "ORDER_VERIFIED", "INVENTORY_ALLOCATED", "ORDER_PROCESSING",
            "PICKING_STARTED", "PICKING_COMPLETED", "PACKING_STARTED", "PACKING_COMPLETED",
            "READY_TO_SHIP", "CARRIER_PICKUP_SCHEDULED", "PICKED_UP", "IN_TRANSIT",
            "WEATHER_DELAY", "IN_TRANSIT", "ARRIVED_AT_ORIGIN", "DEPARTED_ORIGIN",
            "ARRIVED_AT_SORT", "PROCESSED_AT_SORT", "DEPARTED_SORT", "ARRIVED_AT_DESTINATION",
            "OUT_FOR_DELIVERY", "CUSTOMER_UNAVAILABLE", "OUT_FOR_DELIVERY", "DELIVERY_ATTEMPTED",
            "DELIVERED", "DELIVERY_CONFIRMED", "ORDER_COMPLETED",
        )

        rows = order_service.get_status_history(order.id)
        assert order_service.history_is_valid_walk(rows)
        for prev, row in zip(rows, rows[1:]):
            assert row.from_status == prev.to_status
            assert can_transition_to(row.from_status, row.to_status)

        order = db_session.get(Order, order.id)
        assert order.current_status == "ORDER_COMPLETED"
        assert rows[-1].to_status == order.current_status
        assert order.version_id == len(rows)

    def test_failed_attempts_leave_walk_intact(self, make_order):
        order = make_order()
        order_service.advance_status(order.id, "PAYMENT_AUTHORIZED")
        with pytest.raises(InvalidTransition):
            order_service.advance_status(order.id, "DELIVERED")
        order_service.advance_status(order.id, "ORDER_VERIFIED")

        assert order_service.history_is_valid_walk(order_service.get_status_history(order.id))

    def test_broken_walk_detected(self):
        rows = [
            OrderStatusHistory(from_status=None, to_status="ORDER_RECEIVED"),
            OrderStatusHistory(from_status="ORDER_RECEIVED", to_status="ORDER_VERIFIED"),
        ]
        assert not order_service.history_is_valid_walk(rows)

    def test_disconnected_walk_detected(self):
        rows = [
            OrderStatusHistory(from_status=None, to_status="ORDER_RECEIVED"),
            OrderStatusHistory(from_status="PAYMENT_AUTHORIZED", to_status="ORDER_VERIFIED"),
        ]
        assert not order_service.history_is_valid_walk(rows)

    def test_unregistered_code_in_walk_detected(self):
        rows = [
            OrderStatusHistory(from_status=None, to_status="ORDER_RECEIVED"),
            OrderStatusHistory(from_status="ORDER_RECEIVED", to_status="BOGUS"),
        ]
        assert not order_service.history_is_valid_walk(rows)

    def test_unregistered_initial_code_detected(self):
        rows = [OrderStatusHistory(from_status=None, to_status="SHIPPED")]
        assert not order_service.history_is_valid_walk(rows)


class TestOptimisticVersion:

    def test_stale_version_is_retryable_conflict(self, make_order, db_session):
        order = make_order()
        order_service.advance_status(order.id, "PAYMENT_AUTHORIZED", expected_version=1)

        with pytest.raises(ConcurrencyConflict) as exc:
            order_service.advance_status(order.id, "ORDER_VERIFIED", expected_version=1)
        assert exc.value.retryable is True

        order = db_session.get(Order, order.id)
        assert order.current_status == "PAYMENT_AUTHORIZED"
        assert order.version_id == 2

    def test_current_version_applies(self, make_order):
        order = make_order()
        updated = order_service.advance_status(order.id, "PAYMENT_AUTHORIZED", expected_version=1)
        assert updated.version_id == 2

    def test_version_must_be_integer(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            order_service.advance_status(order.id, "PAYMENT_AUTHORIZED", expected_version="1")


class TestLegacySeeding:

    @pytest.mark.parametrize("legacy,expected", [
        ("pending", "ORDER_RECEIVED"),
        ("confirmed", "ORDER_VERIFIED"),
        ("shipped", "IN_TRANSIT"),
        ("completed", "ORDER_COMPLETED"),
    ])
    def test_seed_at_canonical_code(self, db_session, legacy, expected):
        order = order_service.seed_order_from_legacy(
            legacy_status=legacy, customer_id="legacy-1", amount_cents=2500, actor_id="importer",
        )
        assert order.current_status == expected

        history = order_service.get_status_history(order.id)
        assert history[0].from_status is None
        assert history[0].to_status == expected
        assert legacy in history[0].note

    def test_seeded_order_continues_on_detailed_graph(self, db_session):
        order = order_service.seed_order_from_legacy(
            legacy_status="shipped", customer_id="legacy-1", amount_cents=2500,
        )
        updated = order_service.advance_status(order.id, "ARRIVED_AT_ORIGIN")
        assert updated.current_status == "ARRIVED_AT_ORIGIN"

    def test_unknown_legacy_value(self, db_session):
        with pytest.raises(UnknownStatusCode):
            order_service.seed_order_from_legacy(
                legacy_status="refunded", customer_id="legacy-1", amount_cents=2500,
            )
        assert db_session.query(Order).count() == 0


class TestTracking:

    def test_tracking_view(self, make_order):
        order = make_order()
        _walk(order.id, "PAYMENT_AUTHORIZED", "ORDER_VERIFIED", "INVENTORY_ALLOCATED",
              "ORDER_PROCESSING", "PICKING_STARTED", "PICKING_COMPLETED", "PACKING_STARTED",
              "PACKING_COMPLETED", "READY_TO_SHIP", "CARRIER_PICKUP_SCHEDULED", "PICKED_UP")

        tracking = order_service.get_tracking(order.id)

        assert tracking["status"]["code"] == "PICKED_UP"
        assert tracking["status"]["category"] == "shipping"
        assert tracking["status"]["is_milestone"] is True
        assert tracking["legacy_status"] == "shipped"
        assert tracking["is_terminal"] is False
        assert tracking["next_statuses"] == ["IN_TRANSIT", "DELAYED", "LOST"]
        assert tracking["order"]["version_id"] == 12
