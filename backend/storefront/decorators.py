# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g


ACTOR_HEADER = "X-Actor-Id"


def require_actor(f):
    """
    Require an acting identity on the request.

    Sets g.actor_id from the X-Actor-Id header (customer id at checkout,
    reviewer id on admin routes). Authentication itself happens upstream.

    Returns 401 if the header is missing or blank.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor_id = (request.headers.get(ACTOR_HEADER) or "").strip()
        if not actor_id:
            return jsonify({"error": f"{ACTOR_HEADER} header required"}), 401
        if len(actor_id) > 64:
            return jsonify({"error": f"{ACTOR_HEADER} exceeds max length 64"}), 401

        g.actor_id = actor_id
        return f(*args, **kwargs)

    return decorated_function
