# Overview: Service-layer operations for purchases; encapsulates business logic.

"""
Purchase Service

Supplier purchase intake. One call settles the whole purchase:
- stock goes up by each line quantity, with a 'purchase' StockMovement
  carrying the unit cost;
- cash purchases book an expense/purchase ledger row;
- credit purchases open a Payable for the full total instead (no ledger row
  until the payable is paid).

Nothing is committed unless every step succeeds.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import Payable, Purchase, PurchaseItem, Supplier
from ..models.inventory import MOVEMENT_PURCHASE
from ..models.ledger import CATEGORY_PURCHASE, TYPE_EXPENSE
from ..models.purchasing import PAYABLE_OPEN, PAYMENT_TERMS
from ..money import ZERO, parse_money, quantize
from ..validation import coerce_id, coerce_int, optional_id, require_items
from backoffice.time_utils import parse_iso_date
from .concurrency import atomic, increment_stock
from .inventory_service import load_products, record_movement
from .ledger_service import append_transaction
from .payment_method_service import require_payment_method


def normalize_purchase_items(items: list[dict]) -> list[dict]:
    """
    Validate purchase lines: positive product id, positive integer quantity,
    non-negative price.
    """
    normalized = []
    for raw in items:
        try:
            product_id = coerce_id(raw.get("product_id"), "product_id")
            quantity = coerce_int(raw.get("quantity"), "quantity")
            price = parse_money(raw.get("price"), "price")
        except ValidationError as e:
            raise ValidationError(f"Invalid item values: {e}")
        if quantity <= 0:
            raise ValidationError("Invalid item values: quantity must be > 0")
        normalized.append({"product_id": product_id, "quantity": quantity, "price": price})
    return normalized


def purchase_total(items: list[dict]):
    return quantize(sum((it["quantity"] * it["price"] for it in items), ZERO))


def _parse_due_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError("due_date must be an ISO-8601 date")


def create_purchase(session: Session, *, payload: dict) -> Purchase:
    """
    Settle a supplier purchase.

    Args:
        session: Database session
        payload: {supplier_id, items: [{product_id, quantity, price}],
            payment_term: cash|credit, payment_method_id?, due_date?}

    Returns:
        The created Purchase (items loaded)

    Raises:
        ValidationError: Malformed supplier id, items, term or date
        NotFoundError: Unknown supplier or product
    """
    supplier_id = coerce_id(payload.get("supplier_id"), "supplier_id")
    items = normalize_purchase_items(require_items(payload))

    payment_term = payload.get("payment_term") or "cash"
    if payment_term not in PAYMENT_TERMS:
        raise ValidationError(f"payment_term must be one of: {', '.join(sorted(PAYMENT_TERMS))}")

    payment_method_id = None
    due_date = None
    if payment_term == "cash":
        payment_method_id = optional_id(payload.get("payment_method_id"), "payment_method_id")
    else:
        due_date = _parse_due_date(payload.get("due_date"))

    total = purchase_total(items)

    with atomic(session):
        if session.get(Supplier, supplier_id) is None:
            raise NotFoundError("Supplier not found")
        require_payment_method(session, payment_method_id)
        load_products(session, {it["product_id"] for it in items})

        purchase = Purchase(
            supplier_id=supplier_id,
            total_amount=total,
            status="completed",
            payment_term=payment_term,
            due_date=due_date,
        )
        session.add(purchase)
        session.flush()

        for it in items:
            session.add(PurchaseItem(
                purchase_id=purchase.id,
                product_id=it["product_id"],
                quantity=it["quantity"],
                price=it["price"],
            ))
            increment_stock(session, it["product_id"], it["quantity"])
            record_movement(
                session,
                product_id=it["product_id"],
                quantity=it["quantity"],
                type=MOVEMENT_PURCHASE,
                purchase_id=purchase.id,
                unit_cost=it["price"],
            )

        if payment_term == "cash":
            append_transaction(
                session,
                amount=total,
                type=TYPE_EXPENSE,
                category=CATEGORY_PURCHASE,
                description=f"Purchase #{purchase.id}",
                payment_method_id=payment_method_id,
                purchase_id=purchase.id,
            )
        else:
            session.add(Payable(
                supplier_id=supplier_id,
                purchase_id=purchase.id,
                amount=total,
                balance=total,
                status=PAYABLE_OPEN,
                due_date=due_date,
            ))

    return purchase


def list_purchases(session: Session) -> list[Purchase]:
    return session.query(Purchase).order_by(Purchase.id.asc()).all()


def get_purchase(session: Session, purchase_id: int) -> Purchase:
    purchase = session.get(Purchase, purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase not found")
    return purchase
