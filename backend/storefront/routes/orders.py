# Overview: Order fulfillment routes; status changes go through the order status graph.

# backend/storefront/routes/orders.py
"""
Order API Routes

- POST /                  create an order at ORDER_RECEIVED
- POST /import-legacy     create an order from a legacy status value
- GET  /<id>              tracking view
- GET  /<id>/history      status history (oldest first)
- POST /<id>/status       advance to a new status (optional version_id check)
- POST /<id>/cancel       advance to CANCELLED
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_actor
from ..http_errors import DOMAIN_ERRORS, error_response
from ..services import attempt_service, order_service


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("/")
@require_actor
def create_order_route():
    """
    Request body:
    {
        "customer_id": "cust-1",
        "amount_cents": 12000,
        "currency": "USD"  (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        order = order_service.create_order(
            customer_id=data.get("customer_id"),
            amount_cents=data.get("amount_cents"),
            currency=data.get("currency"),
            actor_id=g.actor_id,
            note=data.get("note"),
        )
        return jsonify({"order": order.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/import-legacy")
@require_actor
def import_legacy_order_route():
    """Same body as create plus "legacy_status" (one of the 8 legacy values)."""
    try:
        data = request.get_json(silent=True) or {}
        order = order_service.seed_order_from_legacy(
            legacy_status=data.get("legacy_status"),
            customer_id=data.get("customer_id"),
            amount_cents=data.get("amount_cents"),
            currency=data.get("currency"),
            actor_id=g.actor_id,
        )
        return jsonify({"order": order.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to import legacy order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>")
@require_actor
def get_order_route(order_id: int):
    try:
        tracking = order_service.get_tracking(order_id)
        tracking["payment_attempts"] = [a.to_dict() for a in attempt_service.get_order_attempts(order_id)]
        return jsonify(tracking), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>/history")
@require_actor
def get_order_history_route(order_id: int):
    try:
        rows = order_service.get_status_history(order_id)
        return jsonify({"order_id": order_id, "history": [r.to_dict() for r in rows]}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get order history")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<int:order_id>/status")
@require_actor
def advance_order_status_route(order_id: int):
    """
    Request body:
    {
        "to_status": "PAYMENT_AUTHORIZED",
        "note": "...",        (optional)
        "version_id": 3       (optional, optimistic check)
    }

    Returns:
        200: Order advanced
        400: Unknown code or illegal transition
        404: Order not found
        409: ConcurrencyConflict (reload and retry)
    """
    try:
        data = request.get_json(silent=True) or {}
        to_status = data.get("to_status")
        if not to_status:
            return jsonify({"error": "to_status required", "code": "ValidationError"}), 400

        order = order_service.advance_status(
            order_id,
            to_status,
            actor_id=g.actor_id,
            note=data.get("note"),
            expected_version=data.get("version_id"),
        )
        return jsonify({"order": order.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to advance order status")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<int:order_id>/cancel")
@require_actor
def cancel_order_route(order_id: int):
    """Request body (optional): {"reason": "...", "version_id": 2}"""
    try:
        data = request.get_json(silent=True) or {}
        order = order_service.cancel_order(
            order_id,
            actor_id=g.actor_id,
            reason=data.get("reason"),
            expected_version=data.get("version_id"),
        )
        return jsonify({"order": order.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to cancel order")
        return jsonify({"error": "Internal server error"}), 500
