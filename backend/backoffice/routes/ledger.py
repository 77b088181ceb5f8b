# Overview: Flask API routes for payment methods and manual ledger transactions.

from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..models import Transaction
from ..models.ledger import TRANSACTION_STATUSES, TRANSACTION_TYPES
from ..services import ledger_service, payment_method_service
from ..validation import ModelValidationPolicy, json_body, validate_payload

TRANSACTION_POLICY = ModelValidationPolicy(
    writable_fields={"amount", "type", "category", "status", "description", "payment_method_id"},
    required_on_create={"amount", "type"},
    choices={"type": TRANSACTION_TYPES, "status": TRANSACTION_STATUSES},
)

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")
payment_methods_bp = Blueprint("payment_methods", __name__, url_prefix="/api/payment-methods")


@payment_methods_bp.get("")
@handle_api_errors("Failed to fetch payment methods")
def list_payment_methods():
    methods = payment_method_service.list_payment_methods(db.session)
    return jsonify([m.to_dict() for m in methods])


@payment_methods_bp.post("")
@handle_api_errors("Failed to create payment method")
def create_payment_method_route():
    payload = json_body(request.get_json(silent=True))
    name = payload.get("name")
    created = payment_method_service.create_payment_method(
        db.session, name=name if isinstance(name, str) else ""
    )
    return created.to_dict(), 201


@transactions_bp.get("")
@handle_api_errors("Failed to fetch transactions")
def list_transactions():
    return jsonify([t.to_dict() for t in ledger_service.list_transactions(db.session)])


@transactions_bp.post("")
@handle_api_errors("Failed to create transaction")
def create_transaction_route():
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=False)
    return ledger_service.create_transaction(db.session, patch=patch).to_dict(), 201


@transactions_bp.get("/<int:transaction_id>")
@handle_api_errors("Failed to fetch transaction")
def get_transaction_route(transaction_id: int):
    return ledger_service.get_transaction(db.session, transaction_id).to_dict()


@transactions_bp.put("/<int:transaction_id>")
@handle_api_errors("Failed to update transaction")
def update_transaction_route(transaction_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=True)
    updated = ledger_service.update_transaction(db.session, transaction_id=transaction_id, patch=patch)
    return updated.to_dict()


@transactions_bp.delete("/<int:transaction_id>")
@handle_api_errors("Failed to delete transaction")
def delete_transaction_route(transaction_id: int):
    ledger_service.delete_transaction(db.session, transaction_id=transaction_id)
    return {"message": "Transaction deleted successfully"}
