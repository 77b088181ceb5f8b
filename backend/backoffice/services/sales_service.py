"""
Sales Service - POS checkout and manual orders

Two request variants, chosen explicitly by the caller:
- pos_sale: stock-checked checkout that decrements stock, writes the
  Kardex and books an income row in the ledger, all in one transaction.
- manual_order: a bare Order row (status defaults to 'pending') with no
  stock or ledger effect.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from ..errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from ..models import Customer, Order, OrderItem, StockMovement
from ..models.inventory import MOVEMENT_SALE
from ..models.ledger import CATEGORY_SELLING, TYPE_INCOME
from ..models.sales import ORDER_STATUSES
from ..money import ZERO, parse_money, quantize
from ..validation import coerce_id, coerce_int, optional_id, require_items
from .concurrency import atomic, decrement_stock_if_available
from .inventory_service import load_products, record_movement
from .ledger_service import append_transaction
from .payment_method_service import require_payment_method

KIND_POS_SALE = "pos_sale"
KIND_MANUAL_ORDER = "manual_order"
ORDER_KINDS = {KIND_POS_SALE, KIND_MANUAL_ORDER}


def _normalize_sale_lines(items: list[dict]) -> list[dict]:
    lines = []
    for raw in items:
        product_id = coerce_id(raw.get("product_id"), "product_id")
        quantity = coerce_int(raw.get("quantity"), "quantity")
        if quantity <= 0:
            raise ValidationError("quantity must be > 0")
        price = parse_money(raw.get("price"), "price")
        lines.append({"product_id": product_id, "quantity": quantity, "price": price})
    return lines


def _validate_on_hand(lines: list[dict], products: dict) -> None:
    product_totals: dict[int, int] = {}
    for line in lines:
        product_totals[line["product_id"]] = product_totals.get(line["product_id"], 0) + line["quantity"]

    for product_id, qty in product_totals.items():
        product = products[product_id]
        if product.in_stock < qty:
            raise InsufficientStockError(
                product.name,
                details={
                    "product_id": product_id,
                    "requested_quantity": qty,
                    "in_stock": product.in_stock,
                },
            )


def _sale_description(order_id: int, cash_received: Decimal | None, change: Decimal | None) -> str:
    text = f"Payment for order #{order_id}"
    if cash_received is not None:
        text += f" | Cash: {cash_received:.2f}"
    if change is not None:
        text += f" | Change: {change:.2f}"
    return text


def _optional_money(payload: dict, key: str) -> Decimal | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return parse_money(value, key)


def _require_customer(session: Session, customer_id: int | None) -> None:
    if customer_id is not None and session.get(Customer, customer_id) is None:
        raise NotFoundError("Customer not found")


def checkout(session: Session, *, payload: dict) -> Order:
    """
    Settle a POS sale.

    1. Snapshot stock for all referenced products (one query).
    2. Reject the whole sale if any product is short (409, nothing written).
    3. Create the completed Order and its items.
    4. Per line: conditional decrement + 'sale' StockMovement.
    5. One income/selling ledger row for the total.
    """
    lines = _normalize_sale_lines(require_items(payload))
    customer_id = optional_id(payload.get("customer_id"), "customer_id")
    payment_method_id = optional_id(payload.get("payment_method_id"), "payment_method_id")
    cash_received = _optional_money(payload, "cash_received")
    change = _optional_money(payload, "change")

    computed_total = quantize(sum((line["price"] * line["quantity"] for line in lines), ZERO))
    total = _optional_money(payload, "total")
    if total is None:
        total = computed_total

    with atomic(session):
        _require_customer(session, customer_id)
        require_payment_method(session, payment_method_id)

        products = load_products(session, {line["product_id"] for line in lines})
        _validate_on_hand(lines, products)

        order = Order(customer_id=customer_id, total_amount=total, status="completed")
        session.add(order)
        session.flush()

        for line in lines:
            session.add(OrderItem(
                order_id=order.id,
                product_id=line["product_id"],
                quantity=line["quantity"],
                price=line["price"],
            ))
            if not decrement_stock_if_available(session, line["product_id"], line["quantity"]):
                # Stock moved between the snapshot and the write
                raise InsufficientStockError(products[line["product_id"]].name)
            record_movement(
                session,
                product_id=line["product_id"],
                quantity=-line["quantity"],
                type=MOVEMENT_SALE,
                order_id=order.id,
            )

        append_transaction(
            session,
            amount=total,
            type=TYPE_INCOME,
            category=CATEGORY_SELLING,
            description=_sale_description(order.id, cash_received, change),
            payment_method_id=payment_method_id,
            order_id=order.id,
        )

    return order


def create_manual_order(session: Session, *, payload: dict) -> Order:
    customer_id = optional_id(payload.get("customer_id"), "customer_id")
    raw_total = payload.get("total_amount", payload.get("total"))
    total = ZERO if raw_total is None or raw_total == "" else parse_money(raw_total, "total_amount")
    status = payload.get("status") or "pending"
    if status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(ORDER_STATUSES))}")

    with atomic(session):
        _require_customer(session, customer_id)
        order = Order(customer_id=customer_id, total_amount=total, status=status)
        session.add(order)
    return order


def create_order(session: Session, *, payload: dict) -> Order:
    """Dispatch on the explicit request kind."""
    kind = payload.get("kind")
    if kind not in ORDER_KINDS:
        raise ValidationError(f"kind must be one of: {', '.join(sorted(ORDER_KINDS))}")
    if kind == KIND_POS_SALE:
        return checkout(session, payload=payload)
    return create_manual_order(session, payload=payload)


def list_orders(session: Session) -> list[Order]:
    return session.query(Order).order_by(Order.id.asc()).all()


def get_order(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def _has_stock_movements(session: Session, order: Order) -> bool:
    return session.query(StockMovement.id).filter(StockMovement.order_id == order.id).first() is not None


def update_order(session: Session, *, order_id: int, patch: dict) -> Order:
    """Edit a manual order. POS sales are settled and match their ledger and Kardex rows."""
    order = get_order(session, order_id)
    if _has_stock_movements(session, order):
        raise ConflictError("Settled POS orders cannot be modified")
    with atomic(session):
        if "status" in patch and patch["status"] is not None:
            order.status = patch["status"]
        if "total_amount" in patch and patch["total_amount"] is not None:
            order.total_amount = patch["total_amount"]
    return order


def delete_order(session: Session, *, order_id: int) -> None:
    """
    Delete a manual order and its items. Orders settled at the POS have
    Kardex rows, which are append-only, so they stay.
    """
    order = get_order(session, order_id)
    if _has_stock_movements(session, order):
        raise ConflictError("Order has stock movements and cannot be deleted")
    with atomic(session):
        session.delete(order)
