# Overview: Translation of domain exceptions into JSON error responses.

from flask import jsonify

from .validation import (
    AlreadyDecided,
    ConflictError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)


# Caught by every route; anything else is a 500
DOMAIN_ERRORS = (ValidationError, InvalidTransition, NotFoundError, ConflictError)


def error_response(exc: Exception):
    """
    {"error": message, "code": ExceptionName} plus type-specific details.

    - ValidationError / UnknownStatusCode / InvalidTransition -> 400
    - NotFoundError -> 404
    - ConflictError and subclasses -> 409 (with "retryable")
    """
    body = {"error": str(exc), "code": type(exc).__name__}

    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ConflictError):
        status = 409
        body["retryable"] = exc.retryable
        if isinstance(exc, AlreadyDecided):
            body["decision"] = {
                "attempt_id": exc.attempt_id,
                "status": exc.status,
                "reviewed_by": exc.reviewed_by,
            }
    elif isinstance(exc, InvalidTransition):
        status = 400
        body["from_status"] = exc.from_status
        body["to_status"] = exc.to_status
    else:
        status = 400

    return jsonify(body), status
