# Overview: CSV renderings of the Kardex and the stock report.

from __future__ import annotations

import csv
import io

from ..models import StockMovement
from ..money import to_number
from backoffice.time_utils import to_utc_z

KARDEX_HEADER = [
    "date", "product_id", "product", "barcode", "type",
    "quantity", "unit_cost", "reference",
]

STOCK_HEADER = [
    "product_id", "product", "barcode", "category",
    "in_stock", "price", "stock_value", "low_stock",
]


def _fmt_money(value) -> str:
    return "" if value is None else f"{value:.2f}"


def kardex_csv(movements: list[StockMovement]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(KARDEX_HEADER)
    for m in movements:
        writer.writerow([
            to_utc_z(m.created_at),
            m.product_id,
            m.product.name if m.product else "",
            (m.product.barcode or "") if m.product else "",
            m.type,
            m.quantity,
            _fmt_money(to_number(m.unit_cost)),
            m.reference(),
        ])
    return output.getvalue()


def stock_csv(report: dict) -> str:
    """report is the dict produced by reporting_service.stock_report."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(STOCK_HEADER)
    for row in report["products"]:
        writer.writerow([
            row["id"],
            row["name"],
            row["barcode"] or "",
            row["category"] or "",
            row["in_stock"],
            _fmt_money(row["price"]),
            _fmt_money(row["stock_value"]),
            "yes" if row["low_stock"] else "no",
        ])
    writer.writerow([])
    writer.writerow(["total_value", "", "", "", "", "", _fmt_money(report["total_value"]), ""])
    return output.getvalue()
