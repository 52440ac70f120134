# Overview: Checkout-side payment attempt routes; parses input and returns JSON responses.

# backend/storefront/routes/payments.py
"""
Payment Attempt API Routes

WHY: A checkout submission arrives here with the evidence payload produced by
the gateway adapter (card token, PayPal transaction, crypto tx, bank proof).
The route only parses input; the policy gate in attempt_service decides the
initial status.

SECURITY:
- The acting customer comes from X-Actor-Id and must own the order
- Raw card data is rejected by the per-method payload allowlist
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_actor
from ..http_errors import DOMAIN_ERRORS, error_response
from ..services import attempt_service


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("/attempts")
@require_actor
def create_attempt_route():
    """
    Submit payment evidence for an order.

    Request body:
    {
        "order_id": 12,
        "method": "paypal",
        "amount_cents": 5000,
        "currency": "USD",  (optional, defaults to the order's currency)
        "method_payload": {"email": "...", "transaction_id": "..."}
    }

    Returns:
        201: Attempt created (status pending_review or pending_rejection)
        400: Invalid input
        404: Order not found
        409: Duplicate attempt or order closed
    """
    try:
        data = request.get_json(silent=True) or {}

        order_id = data.get("order_id")
        if not isinstance(order_id, int) or isinstance(order_id, bool):
            return jsonify({"error": "order_id (integer) required", "code": "ValidationError"}), 400

        attempt = attempt_service.create_attempt(
            order_id=order_id,
            method=data.get("method"),
            amount_cents=data.get("amount_cents"),
            method_payload=data.get("method_payload"),
            currency=data.get("currency"),
            customer_id=g.actor_id,
        )
        return jsonify({"attempt": attempt.to_dict()}), 201

    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create payment attempt")
        return jsonify({"error": "Internal server error"}), 500


@payments_bp.get("/attempts/<int:attempt_id>")
@require_actor
def get_attempt_route(attempt_id: int):
    """Attempt with its audit events (oldest first)."""
    try:
        return jsonify(attempt_service.get_attempt_detail(attempt_id)), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get payment attempt")
        return jsonify({"error": "Internal server error"}), 500
