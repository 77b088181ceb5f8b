# Overview: Transaction scope and stock-guard helpers shared by the settlement services.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models import Product


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def atomic(session: Session):
    """
    One settlement, one database transaction.

    Commits when the block exits cleanly; any exception rolls back every
    write made inside the block and propagates unchanged.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def decrement_stock_if_available(session: Session, product_id: int, quantity: int) -> bool:
    """
    Conditional decrement: UPDATE products SET in_stock = in_stock - q
    WHERE id = ? AND in_stock >= q.

    Returns False when no row matched, i.e. another sale committed first and
    the stock read earlier is no longer there.
    """
    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.in_stock >= quantity)
        .values(in_stock=Product.in_stock - quantity)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1


def increment_stock(session: Session, product_id: int, delta: int) -> None:
    """Apply a signed delta with no floor (purchases and adjustments)."""
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(in_stock=Product.in_stock + delta)
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
