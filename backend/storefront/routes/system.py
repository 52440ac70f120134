# backend/storefront/routes/system.py
"""
System health endpoint.

Checks the database round-trip and reports the order status registry summary
(the registry itself was validated at import time).
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Order, PaymentAttempt
from ..order_status import REGISTRY
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        order_count = db.session.query(Order).count()
        attempt_count = db.session.query(PaymentAttempt).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "orders": order_count,
                "payment_attempts": attempt_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database check failed
    """
    database_health = check_database_health()
    healthy = database_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
            "order_status_registry": {"status": "healthy", "details": REGISTRY.summary()},
        }
    }

    return response, 200 if healthy else 503
