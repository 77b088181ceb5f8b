# Overview: Flask API routes for the category catalog.

from flask import Blueprint, jsonify, request

from ..decorators import handle_api_errors
from ..extensions import db
from ..models import Category
from ..services import category_service
from ..validation import ModelValidationPolicy, json_body, validate_payload

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "code", "description", "parent_id", "is_active", "sort_order"},
    required_on_create={"name"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@handle_api_errors("Failed to fetch categories")
def list_categories():
    return jsonify([c.to_dict() for c in category_service.list_categories(db.session)])


@categories_bp.post("")
@handle_api_errors("Failed to create category")
def create_category_route():
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    created = category_service.create_category(db.session, patch=patch)
    return created.to_dict(), 201


@categories_bp.get("/<int:category_id>")
@handle_api_errors("Failed to fetch category")
def get_category_route(category_id: int):
    return category_service.get_category(db.session, category_id).to_dict()


@categories_bp.put("/<int:category_id>")
@handle_api_errors("Failed to update category")
def update_category_route(category_id: int):
    payload = json_body(request.get_json(silent=True))
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    updated = category_service.update_category(db.session, category_id=category_id, patch=patch)
    return updated.to_dict()


@categories_bp.delete("/<int:category_id>")
@handle_api_errors("Failed to delete category")
def delete_category_route(category_id: int):
    category_service.delete_category(db.session, category_id=category_id)
    return {"message": "Category deleted successfully"}
