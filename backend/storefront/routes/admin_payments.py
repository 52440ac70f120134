# Overview: Admin dashboard routes for reviewing payment attempts.

# backend/storefront/routes/admin_payments.py
"""
Payment Verification Admin API

DESIGN:
- /pending is the verification queue (undecided attempts, oldest first)
- / lists any dashboard bucket (all, pending, rejected, approved) with stats
- approve / reject are exactly-once: the loser of a race gets 409 AlreadyDecided
  with the decision that won
- notes never change status

The reviewer is the X-Actor-Id of the request.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_actor
from ..http_errors import DOMAIN_ERRORS, error_response
from ..services import queue_service, review_service, stats_service


admin_payments_bp = Blueprint("admin_payments", __name__, url_prefix="/api/admin/payment-attempts")


# =============================================================================
# QUEUE / LISTINGS
# =============================================================================

@admin_payments_bp.get("/pending")
@require_actor
def list_pending_route():
    """
    Verification queue.

    Query params:
    - method: card | paypal | crypto | bank (optional)
    - search: free text (customer id, order id, payload)
    - page, per_page: pagination
    """
    try:
        result = queue_service.list_pending(
            method=request.args.get("method"),
            search=request.args.get("search"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        return jsonify(result), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list pending payment attempts")
        return jsonify({"error": "Internal server error"}), 500


@admin_payments_bp.get("/")
@require_actor
def list_attempts_route():
    """Attempts in a dashboard bucket (filter=all|pending|rejected|approved) plus overall stats."""
    try:
        result = queue_service.list_attempts(
            bucket=request.args.get("filter", "all"),
            method=request.args.get("method"),
            search=request.args.get("search"),
            page=request.args.get("page"),
            per_page=request.args.get("per_page"),
        )
        result["stats"] = stats_service.get_stats("all").to_dict()
        return jsonify(result), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list payment attempts")
        return jsonify({"error": "Internal server error"}), 500


@admin_payments_bp.get("/stats")
@require_actor
def stats_route():
    """Counts {total, pending, rejected, approved}; period=all|today|week|month."""
    try:
        stats = stats_service.get_stats(request.args.get("period", "all"))
        return jsonify(stats.to_dict()), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to compute payment attempt stats")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# DECISIONS
# =============================================================================

@admin_payments_bp.post("/<int:attempt_id>/approve")
@require_actor
def approve_route(attempt_id: int):
    """
    Approve an attempt. Card attempts are flagged manual_override.

    Request body (optional): {"note": "checked bank statement"}

    Returns:
        200: Approved; linked order moved to PAYMENT_AUTHORIZED
        400: Order cannot move to PAYMENT_AUTHORIZED
        404: Attempt not found
        409: AlreadyDecided / DuplicateAttempt / ConcurrencyConflict
    """
    try:
        data = request.get_json(silent=True) or {}
        attempt = review_service.approve(attempt_id, g.actor_id, note=data.get("note"))
        return jsonify({"attempt": attempt.to_dict(), "order": attempt.order.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to approve payment attempt")
        return jsonify({"error": "Internal server error"}), 500


@admin_payments_bp.post("/<int:attempt_id>/reject")
@require_actor
def reject_route(attempt_id: int):
    """
    Reject an attempt.

    Request body: {"reason": "card declined"}  (required, non-empty)
    """
    try:
        data = request.get_json(silent=True) or {}
        attempt = review_service.reject(attempt_id, g.actor_id, data.get("reason"))
        return jsonify({"attempt": attempt.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to reject payment attempt")
        return jsonify({"error": "Internal server error"}), 500


@admin_payments_bp.post("/<int:attempt_id>/notes")
@require_actor
def add_note_route(attempt_id: int):
    """Request body: {"note": "..."}"""
    try:
        data = request.get_json(silent=True) or {}
        attempt = review_service.add_note(attempt_id, g.actor_id, data.get("note"))
        return jsonify({"attempt": attempt.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add payment attempt note")
        return jsonify({"error": "Internal server error"}), 500
