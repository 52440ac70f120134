# Overview: Derived counts over the payment attempt ledger.

from __future__ import annotations

from dataclasses import dataclass, asdict

from sqlalchemy import func

from ..extensions import db
from ..models import PaymentAttempt
from ..time_utils import STATS_PERIODS, period_start, to_utc_z
from ..validation import ValidationError
from .attempt_service import APPROVED_STATUSES, STATUS_REJECTED, UNDECIDED_STATUSES


@dataclass(frozen=True)
class AttemptStats:
    period: str
    total: int = 0
    pending: int = 0
    rejected: int = 0
    approved: int = 0
    since: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def get_stats(period: str = "all") -> AttemptStats:
    """
    Count attempts by bucket for a reporting window on created_at.

    One grouped scan of payment_attempts; counters can replace it later
    without changing AttemptStats.
    """
    if period not in STATS_PERIODS:
        raise ValidationError(f"Invalid period '{period}'. Must be one of: {', '.join(STATS_PERIODS)}")
    since = period_start(period)

    query = db.session.query(PaymentAttempt.status, func.count(PaymentAttempt.id))
    if since is not None:
        query = query.filter(PaymentAttempt.created_at >= since)
    counts = dict(query.group_by(PaymentAttempt.status).all())

    pending = sum(counts.get(s, 0) for s in UNDECIDED_STATUSES)
    approved = sum(counts.get(s, 0) for s in APPROVED_STATUSES)
    rejected = counts.get(STATUS_REJECTED, 0)

    return AttemptStats(
        period=period,
        total=pending + approved + rejected,
        pending=pending,
        rejected=rejected,
        approved=approved,
        since=to_utc_z(since),
    )
