# Overview: Service-layer operations for reporting; read-only aggregation over the ledger and stock.

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models import Product, Transaction
from ..models.ledger import CATEGORY_SELLING, STATUS_COMPLETED, TYPE_EXPENSE, TYPE_INCOME
from ..money import ZERO, as_money, quantize, to_number
from ..validation import coerce_int
from backoffice.time_utils import to_iso_date


def _completed(session: Session, *columns):
    return session.query(*columns).filter(Transaction.status == STATUS_COMPLETED)


def _sum_amount(session: Session, *criteria) -> Decimal:
    total = _completed(session, func.coalesce(func.sum(Transaction.amount), 0)).filter(*criteria).scalar()
    return as_money(total)


def _by_category(session: Session, tx_type: str) -> dict[str, float]:
    rows = (
        _completed(session, Transaction.category, func.sum(Transaction.amount).label("total"))
        .filter(Transaction.type == tx_type, Transaction.category.isnot(None))
        .group_by(Transaction.category)
        .order_by(Transaction.category.asc())
        .all()
    )
    return {row.category: to_number(as_money(row.total)) for row in rows}


def _day_key(value) -> str:
    # func.date() yields a string on SQLite and a date elsewhere
    if isinstance(value, date):
        return to_iso_date(value)
    return str(value)


def total_revenue(session: Session) -> Decimal:
    return _sum_amount(session, Transaction.type == TYPE_INCOME)


def revenue_by_category(session: Session) -> dict[str, float]:
    return _by_category(session, TYPE_INCOME)


def total_expenses(session: Session) -> Decimal:
    return _sum_amount(session, Transaction.type == TYPE_EXPENSE)


def expenses_by_category(session: Session) -> dict[str, float]:
    return _by_category(session, TYPE_EXPENSE)


def total_profit(session: Session) -> Decimal:
    """Selling income minus every expense."""
    selling = _sum_amount(session, Transaction.category == CATEGORY_SELLING)
    return selling - total_expenses(session)


def _daily_rows(session: Session, *columns):
    day = func.date(Transaction.created_at).label("day")
    return _completed(session, day, *columns).group_by(day).order_by(day).all()


def profit_margin_series(session: Session) -> list[dict]:
    """
    Per day: (selling - expense) / selling * 100, rounded to 2 places.
    Days without selling income report 0.
    """
    rows = _daily_rows(
        session,
        func.sum(case((Transaction.category == CATEGORY_SELLING, Transaction.amount), else_=0)).label("selling"),
        func.sum(
            case(
                (
                    (Transaction.type == TYPE_EXPENSE)
                    & or_(Transaction.category.is_(None), Transaction.category != CATEGORY_SELLING),
                    Transaction.amount,
                ),
                else_=0,
            )
        ).label("expense"),
    )

    series = []
    for row in rows:
        selling = as_money(row.selling)
        expense = as_money(row.expense)
        if selling > 0:
            margin = quantize((selling - expense) / selling * 100)
        else:
            margin = ZERO
        series.append({"date": _day_key(row.day), "margin": float(margin)})
    return series


def cash_flow_series(session: Session) -> list[dict]:
    """Per day: income as inflow, expense as outflow, and their difference."""
    rows = _daily_rows(
        session,
        func.sum(case((Transaction.type == TYPE_INCOME, Transaction.amount), else_=0)).label("inflow"),
        func.sum(case((Transaction.type == TYPE_EXPENSE, Transaction.amount), else_=0)).label("outflow"),
    )
    series = []
    for row in rows:
        inflow = as_money(row.inflow)
        outflow = as_money(row.outflow)
        series.append({
            "date": _day_key(row.day),
            "inflow": float(inflow),
            "outflow": float(outflow),
            "net": float(inflow - outflow),
        })
    return series


def parse_threshold(value, default: int) -> int:
    if value is None or value == "":
        return default
    threshold = coerce_int(value, "threshold")
    if threshold < 0:
        raise ValidationError("threshold must be >= 0")
    return threshold


def stock_report(session: Session, *, threshold: int) -> dict:
    products = session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()

    rows = []
    total_value = ZERO
    low_stock_count = 0
    for product in products:
        price = as_money(product.price)
        value = quantize(price * product.in_stock)
        low = product.in_stock <= threshold
        if low:
            low_stock_count += 1
        total_value += value
        rows.append({
            "id": product.id,
            "name": product.name,
            "barcode": product.barcode,
            "category": product.category,
            "in_stock": product.in_stock,
            "price": float(price),
            "stock_value": float(value),
            "low_stock": low,
        })

    return {
        "threshold": threshold,
        "products": rows,
        "total_products": len(rows),
        "low_stock_count": low_stock_count,
        "total_value": float(total_value),
    }
