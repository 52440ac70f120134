"""
CLI command tests (flask statuses / payments / orders).
"""

from datetime import timedelta

from storefront.models import PaymentAttempt
from storefront.services import ledger_service, order_service
from storefront.time_utils import utcnow


def test_statuses_check(app):
    result = app.test_cli_runner().invoke(args=["statuses", "check"])
    assert result.exit_code == 0
    assert "35 statuses" in result.output
    assert "CANCELLED, ORDER_COMPLETED, RETURNED" in result.output


def test_statuses_list_by_category(app):
    result = app.test_cli_runner().invoke(args=["statuses", "list", "--category", "completion"])
    assert result.exit_code == 0
    assert "DELIVERY_CONFIRMED" in result.output
    assert "ORDER_COMPLETED" in result.output
    assert "(terminal)" in result.output
    assert "IN_TRANSIT " not in result.output


def test_payment_stats(app, make_order, make_attempt):
    make_attempt(make_order(), method="card")
    result = app.test_cli_runner().invoke(args=["payments", "stats", "--period", "today"])
    assert result.exit_code == 0
    assert "Total:    1" in result.output
    assert "Pending:  1" in result.output


def test_sweep_stale_uses_system_reviewer(app, make_order, make_attempt, db_session):
    stale = make_attempt(make_order(customer_id="c1"), method="paypal")
    fresh = make_attempt(make_order(customer_id="c2"), method="paypal")
    db_session.get(PaymentAttempt, stale.id).created_at = utcnow() - timedelta(hours=80)
    db_session.commit()

    result = app.test_cli_runner().invoke(args=["payments", "sweep-stale"])

    assert result.exit_code == 0, result.output
    assert "Rejected 1 stale attempt(s) as 'system'" in result.output
    assert db_session.get(PaymentAttempt, stale.id).status == "rejected"
    assert db_session.get(PaymentAttempt, stale.id).reviewed_by == "system"
    assert db_session.get(PaymentAttempt, fresh.id).status == "pending_review"


def test_sweep_stale_custom_threshold(app, make_order, make_attempt, db_session):
    attempt = make_attempt(make_order(), method="bank")
    db_session.get(PaymentAttempt, attempt.id).created_at = utcnow() - timedelta(hours=3)
    db_session.commit()

    result = app.test_cli_runner().invoke(args=["payments", "sweep-stale", "--hours", "2", "--reviewer", "night-ops"])

    assert result.exit_code == 0, result.output
    assert db_session.get(PaymentAttempt, attempt.id).reviewed_by == "night-ops"


def test_sweep_stale_rejects_bad_threshold(app, db_session):
    result = app.test_cli_runner().invoke(args=["payments", "sweep-stale", "--hours", "0"])
    assert result.exit_code != 0


def test_audit_history(app, make_order):
    order = make_order()
    order_service.advance_status(order.id, "PAYMENT_AUTHORIZED")
    make_order(customer_id="c2")

    result = app.test_cli_runner().invoke(args=["orders", "audit-history"])
    assert result.exit_code == 0, result.output
    assert "2 order histories are valid walks" in result.output


def test_audit_history_reports_unregistered_code(app, make_order, db_session):
    make_order()
    bad = make_order(customer_id="c2")
    ledger_service.append_status_history(order_id=bad.id, from_status="ORDER_RECEIVED", to_status="BOGUS")
    db_session.commit()

    result = app.test_cli_runner().invoke(args=["orders", "audit-history"])
    assert result.exit_code != 0
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert f"1 order(s) with invalid history: {bad.id}" in result.output
