# Overview: Service-layer helpers for locking, retry, and transactional boundaries.

from __future__ import annotations

import logging
import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from .errors import PersistenceError

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write() covers it there.
    populate_existing() makes the locked read win over identity-map state.
    """
    return query.with_for_update().populate_existing()


def begin_write() -> None:
    """
    Take the database write lock at the start of a unit of work.

    On SQLite a deferred transaction lets two writers read the same row before
    either writes; BEGIN IMMEDIATE serializes them up front. Skipped when the
    session already holds pending changes (the caller owns the transaction).
    """
    if db.engine.dialect.name != "sqlite":
        return
    if db.session.new or db.session.dirty or db.session.deleted:
        return
    raw = db.session.connection().connection.dbapi_connection
    if getattr(raw, "in_transaction", False):
        return
    db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Any other SQLAlchemy error rolls back and
    surfaces as PersistenceError; business errors roll back and propagate as-is.
    """
    if attempts is None:
        attempts = current_app.config.get("LEDGER_RETRY_ATTEMPTS", 3)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise PersistenceError(f"Write conflict persisted after {attempts} attempts") from exc
            logger.info("Retrying after write conflict (attempt %d): %s", attempt + 1, exc)
            time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError("Database write failed") from exc
        except Exception:
            db.session.rollback()
            raise
