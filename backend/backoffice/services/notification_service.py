# Overview: Computes back-office notifications (low stock, overdue and due-soon payables) on demand.

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session, joinedload

from ..models import Payable, Product
from ..models.purchasing import PAYABLE_OPEN
from ..money import to_number
from backoffice.time_utils import to_iso_date, to_utc_z, utcnow

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITY_RANK = {PRIORITY_HIGH: 0, PRIORITY_MEDIUM: 1, PRIORITY_LOW: 2}


def stock_priority(in_stock: int) -> str:
    if in_stock <= 0:
        return PRIORITY_HIGH
    if in_stock <= 3:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def due_soon_priority(days_until_due: int) -> str:
    return PRIORITY_HIGH if days_until_due <= 2 else PRIORITY_MEDIUM


def _open_payables(session: Session):
    return (
        session.query(Payable)
        .options(joinedload(Payable.supplier))
        .filter(Payable.status == PAYABLE_OPEN, Payable.balance > 0, Payable.due_date.isnot(None))
    )


def _payable_data(payable: Payable, **extra) -> dict:
    data = {
        "id": payable.id,
        "supplier_id": payable.supplier_id,
        "supplier_name": payable.supplier.name if payable.supplier else None,
        "purchase_id": payable.purchase_id,
        "amount": to_number(payable.amount),
        "balance": to_number(payable.balance),
        "due_date": to_iso_date(payable.due_date),
    }
    data.update(extra)
    return data


def build_notifications(
    session: Session,
    *,
    low_stock_threshold: int,
    due_soon_days: int,
    today: date | None = None,
) -> dict:
    """
    Returns {"notifications": [...], "summary": {...}}.

    Nothing is persisted; every call recomputes from current rows.
    """
    now = utcnow()
    today = today or now.date()
    created_at = to_utc_z(now)

    low_stock = (
        session.query(Product)
        .filter(Product.in_stock <= low_stock_threshold)
        .order_by(Product.in_stock.asc(), Product.id.asc())
        .all()
    )
    overdue = (
        _open_payables(session)
        .filter(Payable.due_date < today)
        .order_by(Payable.due_date.asc(), Payable.id.asc())
        .all()
    )
    due_soon = (
        _open_payables(session)
        .filter(Payable.due_date >= today, Payable.due_date <= today + timedelta(days=due_soon_days))
        .order_by(Payable.due_date.asc(), Payable.id.asc())
        .all()
    )

    notifications = []
    for product in low_stock:
        notifications.append({
            "id": f"stock_{product.id}",
            "type": "low_stock",
            "priority": stock_priority(product.in_stock),
            "title": "Out of stock" if product.in_stock <= 0 else "Low stock",
            "message": f"{product.name}: {product.in_stock} units available",
            "data": {
                "id": product.id,
                "name": product.name,
                "in_stock": product.in_stock,
                "category": product.category,
            },
            "created_at": created_at,
        })

    for payable in overdue:
        supplier = payable.supplier.name if payable.supplier else "Unknown supplier"
        notifications.append({
            "id": f"overdue_{payable.id}",
            "type": "payable_overdue",
            "priority": PRIORITY_HIGH,
            "title": "Payable overdue",
            "message": f"{supplier}: {to_number(payable.balance):.2f} overdue since {to_iso_date(payable.due_date)}",
            "data": _payable_data(payable),
            "created_at": created_at,
        })

    for payable in due_soon:
        supplier = payable.supplier.name if payable.supplier else "Unknown supplier"
        days_until_due = (payable.due_date - today).days
        notifications.append({
            "id": f"due_{payable.id}",
            "type": "payable_due_soon",
            "priority": due_soon_priority(days_until_due),
            "title": "Payable due soon",
            "message": f"{supplier}: {to_number(payable.balance):.2f} due in {days_until_due} days",
            "data": _payable_data(payable, days_until_due=days_until_due),
            "created_at": created_at,
        })

    # Stable: within a priority, insertion order is kept
    notifications.sort(key=lambda n: PRIORITY_RANK[n["priority"]])

    return {
        "notifications": notifications,
        "summary": {
            "low_stock_count": len(low_stock),
            "overdue_payables_count": len(overdue),
            "due_soon_payables_count": len(due_soon),
            "total_count": len(notifications),
        },
    }
