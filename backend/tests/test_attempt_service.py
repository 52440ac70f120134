"""
Payment attempt ledger and security policy gate tests.

Verifies:
- Card attempts are stamped pending_rejection, other methods pending_review
- Amount, method and payload validation
- Duplicate protection per order
- Every attempt gets a CREATED audit event
"""

import pytest

from storefront.models import PaymentAttempt
from storefront.services import attempt_service, order_service, review_service
from storefront.services.attempt_service import (
    STATUS_PENDING_REJECTION,
    STATUS_PENDING_REVIEW,
    resolve_initial_status,
    validate_payment_policy,
)
from storefront.services.ledger_service import EVENT_CREATED, get_attempt_events
from storefront.config import DEFAULT_PAYMENT_POLICY
from storefront.validation import ConflictError, DuplicateAttempt, NotFoundError, ValidationError

from conftest import CARD_PAYLOAD, PAYPAL_PAYLOAD


class TestPolicyGate:

    def test_card_attempt_defaults_to_pending_rejection(self, make_order, make_attempt):
        order = make_order(amount_cents=12000)
        attempt = make_attempt(order, method="card", amount_cents=12000)

        assert attempt.status == STATUS_PENDING_REJECTION
        assert attempt.manual_override is False
        assert attempt.reviewed_by is None

    def test_paypal_attempt_defaults_to_pending_review(self, make_order, make_attempt):
        order = make_order(amount_cents=5000)
        attempt = make_attempt(order, method="paypal", amount_cents=5000)

        assert attempt.status == STATUS_PENDING_REVIEW

    @pytest.mark.parametrize("method", ["crypto", "bank"])
    def test_evidence_methods_default_to_pending_review(self, make_order, make_attempt, method):
        attempt = make_attempt(make_order(), method=method)
        assert attempt.status == STATUS_PENDING_REVIEW

    def test_method_is_case_insensitive(self, make_order, db_session):
        order = make_order()
        attempt = attempt_service.create_attempt(
            order_id=order.id, method="  PayPal ", amount_cents=100, method_payload=PAYPAL_PAYLOAD,
        )
        assert attempt.method == "paypal"

    def test_attempt_links_order_and_writes_created_event(self, make_order, make_attempt, db_session):
        order = make_order()
        attempt = make_attempt(order, method="bank")

        db_session.refresh(order)
        assert order.payment_attempt_id == attempt.id

        events = get_attempt_events(attempt.id)
        assert [e.event_type for e in events] == [EVENT_CREATED]
        assert events[0].to_status == STATUS_PENDING_REVIEW
        assert events[0].actor_id == order.customer_id

    def test_currency_defaults_to_order_currency(self, make_order, make_attempt):
        order = make_order(currency="EUR")
        attempt = make_attempt(order, method="paypal")
        assert attempt.currency == "EUR"


class TestValidation:

    @pytest.mark.parametrize("amount", [0, -1, 12.5, "12.50", "1e3", None, True, 1_000_000_000])
    def test_invalid_amounts_rejected(self, make_order, amount, db_session):
        order = make_order()
        with pytest.raises(ValidationError):
            attempt_service.create_attempt(
                order_id=order.id, method="paypal", amount_cents=amount, method_payload=PAYPAL_PAYLOAD,
            )
        assert db_session.query(PaymentAttempt).count() == 0

    def test_unknown_method_rejected(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            attempt_service.create_attempt(
                order_id=order.id, method="cheque", amount_cents=100, method_payload={},
            )

    @pytest.mark.parametrize("missing", ["token", "brand", "last4", "expiry"])
    def test_card_payload_requires_every_field(self, make_order, missing):
        order = make_order()
        payload = {k: v for k, v in CARD_PAYLOAD.items() if k != missing}
        with pytest.raises(ValidationError) as exc:
            attempt_service.create_attempt(
                order_id=order.id, method="card", amount_cents=100, method_payload=payload,
            )
        assert missing in str(exc.value)

    def test_blank_payload_field_counts_as_missing(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            attempt_service.create_attempt(
                order_id=order.id, method="paypal", amount_cents=100,
                method_payload={"email": "buyer@example.com", "transaction_id": "   "},
            )

    def test_raw_card_number_rejected(self, make_order):
        order = make_order()
        payload = dict(CARD_PAYLOAD, number="4242424242424242")
        with pytest.raises(ValidationError) as exc:
            attempt_service.create_attempt(
                order_id=order.id, method="card", amount_cents=100, method_payload=payload,
            )
        assert "number" in str(exc.value)

    def test_last4_must_be_four_digits(self, make_order):
        order = make_order()
        with pytest.raises(ValidationError):
            attempt_service.create_attempt(
                order_id=order.id, method="card", amount_cents=100,
                method_payload=dict(CARD_PAYLOAD, last4="42a2"),
            )

    def test_unknown_order(self, db_session):
        with pytest.raises(NotFoundError):
            attempt_service.create_attempt(
                order_id=9999, method="paypal", amount_cents=100, method_payload=PAYPAL_PAYLOAD,
            )

    def test_customer_must_own_order(self, make_order):
        order = make_order(customer_id="cust-1")
        with pytest.raises(ValidationError):
            attempt_service.create_attempt(
                order_id=order.id, method="paypal", amount_cents=100,
                method_payload=PAYPAL_PAYLOAD, customer_id="cust-2",
            )

    def test_terminal_order_accepts_no_attempts(self, make_order):
        order = make_order()
        order_service.cancel_order(order.id, actor_id="cust-1", reason="changed mind")
        with pytest.raises(ConflictError):
            attempt_service.create_attempt(
                order_id=order.id, method="paypal", amount_cents=100, method_payload=PAYPAL_PAYLOAD,
            )


class TestDuplicates:

    def test_second_undecided_attempt_same_method_rejected(self, make_order, make_attempt, db_session):
        order = make_order()
        make_attempt(order, method="paypal")
        with pytest.raises(DuplicateAttempt):
            make_attempt(order, method="paypal")
        assert db_session.query(PaymentAttempt).count() == 1

    def test_undecided_attempts_of_different_methods_allowed(self, make_order, make_attempt):
        order = make_order()
        make_attempt(order, method="paypal")
        make_attempt(order, method="card")

    def test_retry_after_rejection_allowed(self, make_order, make_attempt):
        order = make_order()
        first = make_attempt(order, method="card")
        review_service.reject(first.id, "admin1", "card declined")

        second = make_attempt(order, method="card")
        assert second.id != first.id
        assert second.status == STATUS_PENDING_REJECTION

    def test_no_attempts_after_approval(self, make_order, make_attempt):
        order = make_order()
        attempt = make_attempt(order, method="crypto")
        review_service.approve(attempt.id, "admin1")

        with pytest.raises(DuplicateAttempt):
            make_attempt(order, method="bank")


class TestPolicyConfiguration:

    def test_default_policy_is_valid(self):
        assert validate_payment_policy(DEFAULT_PAYMENT_POLICY) == DEFAULT_PAYMENT_POLICY

    def test_policy_may_relax_card(self):
        policy = dict(DEFAULT_PAYMENT_POLICY, card="pending_review")
        assert resolve_initial_status("card", validate_payment_policy(policy)) == "pending_review"

    @pytest.mark.parametrize("policy", [
        {"card": "pending_rejection", "paypal": "pending_review", "crypto": "pending_review"},
        dict(DEFAULT_PAYMENT_POLICY, card="verified"),
        dict(DEFAULT_PAYMENT_POLICY, cash="pending_review"),
    ])
    def test_invalid_policies_refused(self, policy):
        with pytest.raises(ValueError):
            validate_payment_policy(policy)

    def test_app_uses_configured_policy(self, app, make_order, make_attempt, monkeypatch):
        monkeypatch.setitem(app.config, "PAYMENT_POLICY", dict(DEFAULT_PAYMENT_POLICY, card="pending_review"))
        attempt = make_attempt(make_order(), method="card")
        assert attempt.status == STATUS_PENDING_REVIEW


class TestLedgerQueries:

    def test_get_attempt_detail(self, make_order, make_attempt):
        attempt = make_attempt(make_order(), method="paypal")
        detail = attempt_service.get_attempt_detail(attempt.id)

        assert detail["attempt"]["id"] == attempt.id
        assert detail["attempt"]["method_payload"] == PAYPAL_PAYLOAD
        assert [e["event_type"] for e in detail["events"]] == [EVENT_CREATED]

    def test_missing_attempt(self, db_session):
        with pytest.raises(NotFoundError):
            attempt_service.get_attempt(424242)
