# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

"""
Supplier Service

Suppliers are required on every purchase and on every payable. A supplier
with purchase or payable history cannot be deleted; set status='inactive'
instead.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Payable, Purchase, Supplier

SUPPLIER_MUTABLE_FIELDS = {"name", "email", "phone", "address", "tax_id", "status"}


def list_suppliers(session: Session) -> list[Supplier]:
    return session.query(Supplier).order_by(Supplier.name.asc(), Supplier.id.asc()).all()


def get_supplier(session: Session, supplier_id: int) -> Supplier:
    supplier = session.get(Supplier, supplier_id)
    if supplier is None:
        raise NotFoundError("Supplier not found")
    return supplier


def create_supplier(session: Session, *, patch: dict) -> Supplier:
    """
    Create a new supplier.

    Args:
        session: Database session
        patch: Validated fields (name required; email, phone, address,
            tax_id, status optional)

    Returns:
        Created Supplier object

    Raises:
        ValidationError: If the name is blank
    """
    name = (patch.get("name") or "").strip()
    if not name:
        raise ValidationError("Name is required")

    supplier = Supplier(status="active")
    for k, v in patch.items():
        if k in SUPPLIER_MUTABLE_FIELDS:
            setattr(supplier, k, v)
    supplier.name = name
    if not supplier.status:
        supplier.status = "active"

    session.add(supplier)
    session.commit()
    return supplier


def update_supplier(session: Session, *, supplier_id: int, patch: dict) -> Supplier:
    supplier = get_supplier(session, supplier_id)
    if "name" in patch and not (patch["name"] or "").strip():
        raise ValidationError("Name is required")
    for k, v in patch.items():
        if k in SUPPLIER_MUTABLE_FIELDS:
            setattr(supplier, k, v)
    session.commit()
    return supplier


def delete_supplier(session: Session, *, supplier_id: int) -> None:
    supplier = get_supplier(session, supplier_id)
    for model in (Purchase, Payable):
        if session.query(model.id).filter(model.supplier_id == supplier.id).first() is not None:
            raise ConflictError("Supplier has purchases or payables and cannot be deleted")
    session.delete(supplier)
    session.commit()
