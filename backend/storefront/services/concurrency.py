# Overview: Locking, compare-and-swap and retry helpers shared by the services.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..validation import ConcurrencyConflict


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def compare_and_swap(stmt) -> bool:
    """
    Execute a guarded UPDATE and report whether it matched a row.

    The WHERE clause of `stmt` carries the expected state (status, version).
    A rowcount of 0 means another writer got there first.
    """
    result = db.session.execute(stmt)
    return bool(result.rowcount)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on lock contention.

    Retries on OperationalError (database locked, deadlocks). A StaleDataError
    from the ORM is an optimistic-lock loss and is surfaced as
    ConcurrencyConflict so the caller decides whether to retry.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except StaleDataError as exc:
            db.session.rollback()
            raise ConcurrencyConflict(str(exc)) from exc
        except OperationalError as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
