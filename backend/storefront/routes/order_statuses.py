# Overview: Read-only routes over the order status registry.

from flask import Blueprint, jsonify, current_app

from ..http_errors import DOMAIN_ERRORS, error_response
from ..order_status import (
    REGISTRY,
    StatusCategory,
    get_next_statuses,
    legacy_to_detailed,
)


order_statuses_bp = Blueprint("order_statuses", __name__, url_prefix="/api/order-statuses")


@order_statuses_bp.get("/")
def list_statuses_route():
    """Status catalog grouped by category, in flow order."""
    catalog = {
        category.value: [d.to_dict() for d in REGISTRY.by_category(category)]
        for category in StatusCategory
    }
    return jsonify({
        "categories": catalog,
        "terminal": sorted(s.value for s in REGISTRY.terminal_statuses),
        "summary": REGISTRY.summary(),
    }), 200


@order_statuses_bp.get("/<code>")
def get_status_route(code: str):
    try:
        definition = REGISTRY.definition(code)
        payload = definition.to_dict()
        payload["legacy_status"] = REGISTRY.to_legacy(definition.code).value
        payload["is_terminal"] = REGISTRY.is_terminal(definition.code)
        return jsonify(payload), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get order status")
        return jsonify({"error": "Internal server error"}), 500


@order_statuses_bp.get("/<code>/next")
def next_statuses_route(code: str):
    try:
        source = REGISTRY.parse(code)
        return jsonify({
            "from": source.value,
            "next": [REGISTRY.definition(s).to_dict() for s in get_next_statuses(source)],
        }), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get next order statuses")
        return jsonify({"error": "Internal server error"}), 500


@order_statuses_bp.get("/legacy/<value>")
def legacy_status_route(value: str):
    try:
        code = legacy_to_detailed(value)
        return jsonify({"legacy_status": value, "status": REGISTRY.definition(code).to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to translate legacy status")
        return jsonify({"error": "Internal server error"}), 500
