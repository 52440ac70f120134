# Overview: Read-only listings of payment attempts for the admin dashboard.

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import String, cast, or_

from ..extensions import db
from ..models import PaymentAttempt
from ..validation import ValidationError, validate_method
from .attempt_service import STATUS_BUCKETS


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _page_args(page: Any, per_page: Any) -> tuple[int, int]:
    default_size = current_app.config.get("VERIFICATION_QUEUE_PAGE_SIZE", 25)
    max_size = current_app.config.get("VERIFICATION_QUEUE_MAX_PAGE_SIZE", 100)

    try:
        page = int(page) if page is not None else 1
        per_page = int(per_page) if per_page is not None else default_size
    except (TypeError, ValueError):
        raise ValidationError("page and per_page must be integers")

    page = max(page, 1)
    per_page = max(1, min(per_page, max_size))
    return page, per_page


def list_attempts(
    *,
    bucket: str = "all",
    method: str | None = None,
    search: str | None = None,
    page: Any = None,
    per_page: Any = None,
) -> dict:
    """
    Attempts in one dashboard bucket, filtered and paginated.

    Args:
        bucket: all, pending, rejected or approved
        method: Restrict to one payment method
        search: Case-insensitive match on customer id, order id or payload
        page: 1-indexed page number
        per_page: Page size (clamped to VERIFICATION_QUEUE_MAX_PAGE_SIZE)

    Pending attempts are listed oldest first (queue order); other buckets
    newest first.
    """
    if bucket not in STATUS_BUCKETS:
        raise ValidationError(f"Invalid filter '{bucket}'. Must be one of: {', '.join(STATUS_BUCKETS)}")
    page, per_page = _page_args(page, per_page)

    query = db.session.query(PaymentAttempt).filter(PaymentAttempt.status.in_(STATUS_BUCKETS[bucket]))

    if method:
        query = query.filter(PaymentAttempt.method == validate_method(method))

    if search and search.strip():
        term = f"%{_escape_like(search.strip())}%"
        query = query.filter(
            or_(
                PaymentAttempt.customer_id.ilike(term, escape="\\"),
                cast(PaymentAttempt.order_id, String).ilike(term, escape="\\"),
                PaymentAttempt.method_payload.ilike(term, escape="\\"),
            )
        )

    if bucket == "pending":
        query = query.order_by(PaymentAttempt.created_at.asc(), PaymentAttempt.id.asc())
    else:
        query = query.order_by(PaymentAttempt.created_at.desc(), PaymentAttempt.id.desc())

    total = query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    attempts = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [a.to_dict() for a in attempts],
        "count": len(attempts),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def list_pending(
    *,
    method: str | None = None,
    search: str | None = None,
    page: Any = None,
    per_page: Any = None,
) -> dict:
    """Verification queue: undecided attempts only, oldest first. No side effects."""
    return list_attempts(bucket="pending", method=method, search=search, page=page, per_page=per_page)
