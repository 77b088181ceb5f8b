# Overview: Flask API routes for orders (POS checkout and manual orders); parses input and returns JSON responses.

# backend/backoffice/routes/sales.py
"""
Order routes.

POST /api/orders requires an explicit "kind":
- "pos_sale": stock-checked checkout (decrements stock, writes the Kardex,
  books the income). Insufficient stock returns 409 and writes nothing.
- "manual_order": bare order row, no stock or ledger effect.
"""
from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..models import Order
from ..models.sales import ORDER_STATUSES
from ..services import sales_service
from ..validation import ModelValidationPolicy, json_body, validate_payload

ORDER_POLICY = ModelValidationPolicy(
    writable_fields={"status", "total_amount"},
    choices={"status": ORDER_STATUSES},
)

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@handle_api_errors("Failed to fetch orders")
def list_orders():
    return jsonify([o.to_dict() for o in sales_service.list_orders(db.session)])


@orders_bp.post("")
@handle_api_errors("Failed to create order")
def create_order_route():
    payload = json_body(request.get_json(silent=True))
    order = sales_service.create_order(db.session, payload=payload)
    return order.to_dict(include_items=True), 201


@orders_bp.get("/<int:order_id>")
@handle_api_errors("Failed to fetch order")
def get_order_route(order_id: int):
    return sales_service.get_order(db.session, order_id).to_dict(include_items=True)


@orders_bp.put("/<int:order_id>")
@handle_api_errors("Failed to update order")
def update_order_route(order_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Order, payload=payload, policy=ORDER_POLICY, partial=True)
    order = sales_service.update_order(db.session, order_id=order_id, patch=patch)
    return order.to_dict(include_items=True)


@orders_bp.delete("/<int:order_id>")
@handle_api_errors("Failed to delete order")
def delete_order_route(order_id: int):
    sales_service.delete_order(db.session, order_id=order_id)
    return {"message": "Order deleted successfully"}
