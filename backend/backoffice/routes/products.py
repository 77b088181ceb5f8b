# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/backoffice/routes/products.py
"""
Product catalog routes.

GET /api/products?barcode=... is the POS scanner lookup: it returns the one
matching product or 404 instead of a list.
"""
from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_product,
    json_body,
    optional_id,
    validate_payload,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "in_stock", "category", "barcode"},
    required_on_create={"name", "price"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _category_args(payload: dict) -> dict:
    name = payload.get("category_name")
    return {
        "category_id": optional_id(payload.get("category_id"), "category_id"),
        "category_name": name if isinstance(name, str) else None,
    }


@products_bp.get("")
@handle_api_errors("Failed to fetch products")
def list_products():
    barcode = request.args.get("barcode")
    if barcode is not None and barcode.strip():
        return products_service.get_product_by_barcode(db.session, barcode).to_dict()
    return jsonify([p.to_dict() for p in products_service.list_products(db.session)])


@products_bp.post("")
@handle_api_errors("Failed to create product")
def create_product_route():
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    created = products_service.create_product(db.session, patch=patch, **_category_args(payload))
    return created.to_dict(), 201


@products_bp.get("/<int:product_id>")
@handle_api_errors("Failed to fetch product")
def get_product_route(product_id: int):
    return products_service.get_product(db.session, product_id).to_dict()


@products_bp.put("/<int:product_id>")
@handle_api_errors("Failed to update product")
def update_product_route(product_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)

    updated = products_service.update_product(
        db.session, product_id=product_id, patch=patch, **_category_args(payload)
    )
    return updated.to_dict()


@products_bp.delete("/<int:product_id>")
@handle_api_errors("Failed to delete product")
def delete_product_route(product_id: int):
    products_service.delete_product(db.session, product_id=product_id)
    return {"message": "Product deleted successfully"}
