# Overview: Flask API routes for financial aggregates and stock reports; read-only.

# backend/backoffice/routes/reports.py
"""
Reporting routes.

/api/admin/* aggregates completed ledger rows (revenue, expenses, profit,
margin, cash flow). /api/reports/stock lists on-hand value per product with a
low-stock flag; ?threshold overrides LOW_STOCK_THRESHOLD.
"""
from flask import Blueprint, Response, current_app, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..money import to_number
from ..services import export_service, reporting_service
from backoffice.time_utils import utcnow

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")
reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@admin_bp.get("/revenue/total")
@handle_api_errors("Failed to fetch total revenue")
def revenue_total():
    return {"total_revenue": to_number(reporting_service.total_revenue(db.session))}


@admin_bp.get("/revenue/category")
@handle_api_errors("Failed to fetch revenue by category")
def revenue_category():
    return {"revenue_by_category": reporting_service.revenue_by_category(db.session)}


@admin_bp.get("/expenses/total")
@handle_api_errors("Failed to fetch total expenses")
def expenses_total():
    return {"total_expenses": to_number(reporting_service.total_expenses(db.session))}


@admin_bp.get("/expenses/category")
@handle_api_errors("Failed to fetch expenses by category")
def expenses_category():
    return {"expenses_by_category": reporting_service.expenses_by_category(db.session)}


@admin_bp.get("/profit/total")
@handle_api_errors("Failed to calculate profit")
def profit_total():
    return {"total_profit": to_number(reporting_service.total_profit(db.session))}


@admin_bp.get("/profit/margin")
@handle_api_errors("Failed to calculate profit margin")
def profit_margin():
    return {"profit_margin": reporting_service.profit_margin_series(db.session)}


@admin_bp.get("/cashflow")
@handle_api_errors("Failed to fetch cash flow data")
def cash_flow():
    return {"cash_flow": reporting_service.cash_flow_series(db.session)}


def _stock_report() -> dict:
    threshold = reporting_service.parse_threshold(
        request.args.get("threshold"), current_app.config["LOW_STOCK_THRESHOLD"]
    )
    return reporting_service.stock_report(db.session, threshold=threshold)


@reports_bp.get("/stock")
@handle_api_errors("Failed to build stock report")
def stock_report():
    return _stock_report()


@reports_bp.get("/stock/export")
@handle_api_errors("Failed to export stock report")
def export_stock_report():
    filename = f"stock_report_{utcnow().strftime('%Y%m%d')}.csv"
    return Response(
        export_service.stock_csv(_stock_report()),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
