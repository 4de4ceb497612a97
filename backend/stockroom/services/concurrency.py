# Overview: Row locking, retry and atomic stock updates shared by the services.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import Product
from ..time_utils import utcnow


def lock_for_update(query):
    """
    Apply row-level locking for read-modify-write sequences.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a unit of work with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must be safe to re-run from the
    start: the session is rolled back before each retry.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Retrying database operation after concurrency failure (attempt %d/%d)",
                attempt + 1,
                attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))


def apply_stock_delta(product: Product, delta: int) -> bool:
    """
    Add delta to a product's stock in a single UPDATE statement.

    Decrements only match while stock >= -delta, so concurrent requests can
    never drive stock below zero. Returns False when the guard rejected the
    update. The in-memory product's stock is expired so the next read sees
    the database value.
    """
    query = db.session.query(Product).filter(Product.id == product.id)
    if delta < 0:
        query = query.filter(Product.stock >= -delta)

    updated = query.update(
        {Product.stock: Product.stock + delta, Product.updated_at: utcnow()},
        synchronize_session=False,
    )
    db.session.expire(product, ["stock", "updated_at"])
    return updated == 1
