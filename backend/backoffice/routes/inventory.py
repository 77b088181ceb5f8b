# Overview: Flask API routes for inventory adjustments and the Kardex; parses input and returns JSON responses.

from flask import Blueprint, Response, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..services import export_service, inventory_service
from ..validation import json_body, optional_id
from backoffice.time_utils import utcnow

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


def _movement_filters() -> dict:
    """Kardex query params: productId, from, to, type."""
    return {
        "product_id": optional_id(request.args.get("productId"), "productId"),
        "start": request.args.get("from"),
        "end": request.args.get("to"),
        "movement_type": request.args.get("type") or None,
    }


@inventory_bp.get("/adjustments")
@handle_api_errors("Failed to fetch adjustments")
def list_adjustments():
    return jsonify([a.to_dict() for a in inventory_service.list_adjustments(db.session)])


@inventory_bp.post("/adjustments")
@handle_api_errors("Failed to create adjustment")
def create_adjustment_route():
    payload = json_body(request.get_json(silent=True))
    items = payload.get("items")
    adjustment = inventory_service.create_adjustment(
        db.session,
        reason=payload.get("reason") if isinstance(payload.get("reason"), str) else None,
        items=items if isinstance(items, list) else [],
    )
    return adjustment.to_dict(), 201


@inventory_bp.get("/movements")
@handle_api_errors("Failed to fetch stock movements")
def list_movements():
    movements = inventory_service.list_movements(db.session, **_movement_filters())
    return jsonify([m.to_dict() for m in movements])


@inventory_bp.get("/movements/export")
@handle_api_errors("Failed to export stock movements")
def export_movements():
    movements = inventory_service.list_movements(db.session, **_movement_filters())
    filename = f"kardex_{utcnow().strftime('%Y%m%d')}.csv"
    return Response(
        export_service.kardex_csv(movements),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
