# Overview: Flask API routes for suppliers and customers; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..models import Customer, Supplier
from ..services import customer_service, supplier_service
from ..validation import ModelValidationPolicy, json_body, validate_payload

PARTNER_STATUSES = {"active", "inactive"}

SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address", "tax_id", "status"},
    required_on_create={"name"},
    choices={"status": PARTNER_STATUSES},
)

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "status"},
    required_on_create={"name"},
    choices={"status": PARTNER_STATUSES},
)

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")
customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@suppliers_bp.get("")
@handle_api_errors("Failed to fetch suppliers")
def list_suppliers():
    return jsonify([s.to_dict() for s in supplier_service.list_suppliers(db.session)])


@suppliers_bp.post("")
@handle_api_errors("Failed to create supplier")
def create_supplier_route():
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=False)
    return supplier_service.create_supplier(db.session, patch=patch).to_dict(), 201


@suppliers_bp.get("/<int:supplier_id>")
@handle_api_errors("Failed to fetch supplier")
def get_supplier_route(supplier_id: int):
    return supplier_service.get_supplier(db.session, supplier_id).to_dict()


@suppliers_bp.put("/<int:supplier_id>")
@handle_api_errors("Failed to update supplier")
def update_supplier_route(supplier_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=True)
    return supplier_service.update_supplier(db.session, supplier_id=supplier_id, patch=patch).to_dict()


@suppliers_bp.delete("/<int:supplier_id>")
@handle_api_errors("Failed to delete supplier")
def delete_supplier_route(supplier_id: int):
    supplier_service.delete_supplier(db.session, supplier_id=supplier_id)
    return {"message": "Supplier deleted successfully"}


@customers_bp.get("")
@handle_api_errors("Failed to fetch customers")
def list_customers():
    return jsonify([c.to_dict() for c in customer_service.list_customers(db.session)])


@customers_bp.post("")
@handle_api_errors("Failed to create customer")
def create_customer_route():
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    return customer_service.create_customer(db.session, patch=patch).to_dict(), 201


@customers_bp.get("/<int:customer_id>")
@handle_api_errors("Failed to fetch customer")
def get_customer_route(customer_id: int):
    return customer_service.get_customer(db.session, customer_id).to_dict()


@customers_bp.put("/<int:customer_id>")
@handle_api_errors("Failed to update customer")
def update_customer_route(customer_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    return customer_service.update_customer(db.session, customer_id=customer_id, patch=patch).to_dict()


@customers_bp.delete("/<int:customer_id>")
@handle_api_errors("Failed to delete customer")
def delete_customer_route(customer_id: int):
    customer_service.delete_customer(db.session, customer_id=customer_id)
    return {"message": "Customer deleted successfully"}
