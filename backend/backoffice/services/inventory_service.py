# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/backoffice/services/inventory_service.py

"""
Inventory Invariants (authoritative)

Stock model:
- Product.in_stock is the stored on-hand counter.
- Every settlement that changes in_stock appends exactly one StockMovement per
  line, in the same DB transaction, with quantity equal to the signed delta.
- StockMovement rows are append-only (no updates/deletes).

Sign rules:
- sale: negative, never drives in_stock below zero.
- purchase: positive, unit_cost = purchase line price.
- adjustment: any non-zero value, no floor (in_stock may go negative).

Time semantics:
- created_at is stored UTC-naive; Kardex filters are inclusive on both ends.
- A date-only 'to' bound ("2026-10-19") covers that whole day.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from ..errors import NotFoundError, ValidationError
from ..models import InventoryAdjustment, InventoryAdjustmentItem, Product, StockMovement
from ..models.inventory import MOVEMENT_ADJUSTMENT, MOVEMENT_TYPES
from ..validation import check_max_length, coerce_int
from backoffice.time_utils import parse_iso_datetime
from .concurrency import atomic, increment_stock


def record_movement(
    session: Session,
    *,
    product_id: int,
    quantity: int,
    type: str,
    order_id: int | None = None,
    purchase_id: int | None = None,
    adjustment_id: int | None = None,
    unit_cost: Decimal | None = None,
) -> StockMovement:
    """
    Append a StockMovement. No commit: callers own the transaction scope.

    Failures propagate and abort the enclosing settlement.
    """
    if type not in MOVEMENT_TYPES:
        raise ValueError(f"invalid movement type {type!r}")
    if quantity == 0:
        raise ValueError("movement quantity must be non-zero")

    movement = StockMovement(
        product_id=product_id,
        quantity=quantity,
        type=type,
        order_id=order_id,
        purchase_id=purchase_id,
        adjustment_id=adjustment_id,
        unit_cost=unit_cost,
    )
    session.add(movement)
    return movement


def load_products(session: Session, product_ids: set[int]) -> dict[int, Product]:
    """
    Read every referenced product in one query.

    Raises NotFoundError naming the first missing id.
    """
    if not product_ids:
        return {}
    products = session.query(Product).filter(Product.id.in_(product_ids)).all()
    by_id = {p.id: p for p in products}
    missing = sorted(product_ids - by_id.keys())
    if missing:
        raise NotFoundError(f"Product {missing[0]} not found", details={"product_ids": missing})
    return by_id


def normalize_adjustment_items(items: list) -> list[dict]:
    """
    Keep only applicable items: a positive product id and a non-zero
    integer quantity. Anything else is dropped.

    Raises ValidationError when nothing is left, or when a note is longer
    than the column allows.
    """
    valid = []
    for raw in items or []:
        if not isinstance(raw, dict):
            continue
        try:
            product_id = coerce_int(raw.get("product_id"), "product_id")
            quantity = coerce_int(raw.get("quantity"), "quantity")
        except ValidationError:
            continue
        if product_id <= 0 or quantity == 0:
            continue
        note = raw.get("note")
        note = str(note).strip() if note is not None else ""
        check_max_length(InventoryAdjustmentItem, "note", note)
        valid.append({"product_id": product_id, "quantity": quantity, "note": note or None})

    if not valid:
        raise ValidationError("No valid adjustment items: each item needs a product and a non-zero quantity")
    return valid


def create_adjustment(session: Session, *, reason: str | None, items: list) -> InventoryAdjustment:
    """
    Manual stock correction.

    Applies each signed delta to in_stock without a floor and appends an
    'adjustment' StockMovement per item. Not a financial event: no ledger row.
    """
    normalized = normalize_adjustment_items(items)
    reason = (reason or "").strip() or None
    check_max_length(InventoryAdjustment, "reason", reason)

    with atomic(session):
        load_products(session, {it["product_id"] for it in normalized})

        adjustment = InventoryAdjustment(reason=reason)
        session.add(adjustment)
        session.flush()

        for it in normalized:
            session.add(InventoryAdjustmentItem(
                adjustment_id=adjustment.id,
                product_id=it["product_id"],
                quantity=it["quantity"],
                note=it["note"],
            ))
            increment_stock(session, it["product_id"], it["quantity"])
            record_movement(
                session,
                product_id=it["product_id"],
                quantity=it["quantity"],
                type=MOVEMENT_ADJUSTMENT,
                adjustment_id=adjustment.id,
            )

    return adjustment


def list_adjustments(session: Session) -> list[InventoryAdjustment]:
    return (
        session.query(InventoryAdjustment)
        .options(joinedload(InventoryAdjustment.items))
        .order_by(InventoryAdjustment.created_at.desc(), InventoryAdjustment.id.desc())
        .all()
    )


def _parse_bound(value: str | None, field: str, *, end: bool) -> tuple[datetime | None, bool]:
    """
    Returns (datetime, exclusive). A date-only upper bound becomes an
    exclusive bound at the start of the following day.
    """
    if not value or not value.strip():
        return None, False
    value = value.strip()
    try:
        dt = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date or datetime")
    if end and len(value) == 10:
        return dt + timedelta(days=1), True
    return dt, False


def list_movements(
    session: Session,
    *,
    product_id: int | None = None,
    start: str | None = None,
    end: str | None = None,
    movement_type: str | None = None,
) -> list[StockMovement]:
    """Kardex: movements newest first, optionally filtered."""
    q = session.query(StockMovement).options(joinedload(StockMovement.product))

    if product_id is not None:
        q = q.filter(StockMovement.product_id == product_id)

    if movement_type:
        if movement_type not in MOVEMENT_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(sorted(MOVEMENT_TYPES))}")
        q = q.filter(StockMovement.type == movement_type)

    start_dt, _ = _parse_bound(start, "from", end=False)
    end_dt, end_exclusive = _parse_bound(end, "to", end=True)
    if start_dt is not None:
        q = q.filter(StockMovement.created_at >= start_dt)
    if end_dt is not None:
        if end_exclusive:
            q = q.filter(StockMovement.created_at < end_dt)
        else:
            q = q.filter(StockMovement.created_at <= end_dt)

    return q.order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).all()
