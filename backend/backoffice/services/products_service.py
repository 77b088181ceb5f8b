# backend/backoffice/services/products_service.py
"""
Products Service

Direct catalog edits. Stock changes that come from business events go
through the settlement services instead (sales, purchases, adjustments) so
that each one leaves a StockMovement behind.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError
from ..models import (
    Category,
    InventoryAdjustmentItem,
    OrderItem,
    Product,
    PurchaseItem,
    StockMovement,
)
from .category_service import upsert_category_by_name

PRODUCT_MUTABLE_FIELDS = {"name", "description", "price", "in_stock", "category", "barcode"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(session: Session) -> list[Product]:
    return session.query(Product).order_by(Product.id.asc()).all()


def get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def get_product_by_barcode(session: Session, barcode: str) -> Product:
    product = session.query(Product).filter_by(barcode=barcode.strip()).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _ensure_barcode_free(session: Session, barcode: str | None, product_id: int | None = None) -> None:
    if not barcode:
        return
    q = session.query(Product.id).filter(Product.barcode == barcode)
    if product_id is not None:
        q = q.filter(Product.id != product_id)
    if q.first() is not None:
        raise ConflictError("Barcode already exists")


def _resolve_category(
    session: Session,
    patch: dict,
    *,
    category_id: int | None,
    category_name: str | None,
) -> None:
    """
    Fill patch["category_id"] (and the display name when absent) from either
    an explicit catalog id or a free-text name, which is upserted.

    A bare "category" display name is upserted the same way; clearing it
    unlinks the catalog row so the two fields never disagree.
    """
    if category_id is not None:
        category = session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        patch["category_id"] = category.id
        if not patch.get("category"):
            patch["category"] = category.name
        return

    if category_name and category_name.strip():
        category = upsert_category_by_name(session, category_name)
        patch["category_id"] = category.id
        if not patch.get("category"):
            patch["category"] = category.name
        return

    if "category" in patch:
        text = patch["category"]
        if isinstance(text, str) and text.strip():
            category = upsert_category_by_name(session, text)
            patch["category"] = category.name
            patch["category_id"] = category.id
        else:
            patch["category"] = None
            patch["category_id"] = None


def create_product(
    session: Session,
    *,
    patch: dict,
    category_id: int | None = None,
    category_name: str | None = None,
) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ConflictError: If the barcode is already assigned
    """
    _ensure_barcode_free(session, patch.get("barcode"))
    _resolve_category(session, patch, category_id=category_id, category_name=category_name)

    product = Product()
    apply_product_patch(product, patch)
    product.category_id = patch.get("category_id")
    if product.in_stock is None:
        product.in_stock = 0

    session.add(product)
    session.commit()
    return product


def update_product(
    session: Session,
    *,
    product_id: int,
    patch: dict,
    category_id: int | None = None,
    category_name: str | None = None,
) -> Product:
    product = get_product(session, product_id)
    if "barcode" in patch:
        _ensure_barcode_free(session, patch["barcode"], product_id=product.id)
    _resolve_category(session, patch, category_id=category_id, category_name=category_name)

    apply_product_patch(product, patch)
    if "category_id" in patch:
        product.category_id = patch["category_id"]

    session.commit()
    return product


def delete_product(session: Session, *, product_id: int) -> None:
    """
    Delete a product that has no sales, purchase or stock history.
    History rows are append-only, so a referenced product stays.
    """
    product = get_product(session, product_id)

    for model in (OrderItem, PurchaseItem, InventoryAdjustmentItem, StockMovement):
        if session.query(model.id).filter(model.product_id == product.id).first() is not None:
            raise ConflictError("Product has sales or stock history and cannot be deleted")

    session.delete(product)
    session.commit()
