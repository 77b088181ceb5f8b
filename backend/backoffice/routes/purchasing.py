# Overview: Flask API routes for purchases and supplier payables; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..services import payable_service, purchase_service
from ..validation import json_body

purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")
payables_bp = Blueprint("payables", __name__, url_prefix="/api/payables")


@purchases_bp.get("")
@handle_api_errors("Failed to fetch purchases")
def list_purchases():
    return jsonify([p.to_dict() for p in purchase_service.list_purchases(db.session)])


@purchases_bp.post("")
@handle_api_errors("Failed to create purchase")
def create_purchase_route():
    """
    Record a supplier purchase.

    Body: {supplier_id, items: [{product_id, quantity, price}],
           payment_term: "cash"|"credit", payment_method_id?, due_date?}
    """
    payload = json_body(request.get_json(silent=True))
    purchase = purchase_service.create_purchase(db.session, payload=payload)
    return purchase.to_dict(include_items=True), 201


@purchases_bp.get("/<int:purchase_id>")
@handle_api_errors("Failed to fetch purchase")
def get_purchase_route(purchase_id: int):
    return purchase_service.get_purchase(db.session, purchase_id).to_dict(include_items=True)


@payables_bp.get("")
@handle_api_errors("Failed to fetch payables")
def list_payables():
    return jsonify([p.to_dict() for p in payable_service.list_payables(db.session)])


@payables_bp.get("/<int:payable_id>")
@handle_api_errors("Failed to fetch payable")
def get_payable_route(payable_id: int):
    return payable_service.get_payable(db.session, payable_id).to_dict()


@payables_bp.post("/<int:payable_id>/payments")
@handle_api_errors("Failed to process payment")
def pay_payable_route(payable_id: int):
    payload = json_body(request.get_json(silent=True))
    payment, payable = payable_service.record_payment(db.session, payable_id=payable_id, payload=payload)
    return {"payment": payment.to_dict(), "payable": payable.to_dict()}, 201


@payables_bp.post("/<int:payable_id>/cancel")
@handle_api_errors("Failed to cancel payable")
def cancel_payable_route(payable_id: int):
    return payable_service.cancel_payable(db.session, payable_id=payable_id).to_dict()
