# Overview: Locking and retry helpers shared by every service that writes stock or counters.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The conditional UPDATE statements in the services are what actually keep
    stock and the invoice counter consistent on SQLite.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a unit of work as one transaction.

    Any exception rolls the session back before propagating, so a failed
    operation never leaves half its writes pending. OperationalError
    (locks, deadlocks) and StaleDataError are retried with exponential
    backoff; everything else is raised on the first failure.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise


def execute_conditional(stmt) -> int:
    """Run a guarded UPDATE and return how many rows matched its WHERE clause."""
    result = db.session.execute(stmt)
    return result.rowcount or 0
