# Overview: Service-layer operations for customers; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Customer, Order

CUSTOMER_MUTABLE_FIELDS = {"name", "email", "phone", "status"}


def list_customers(session: Session) -> list[Customer]:
    return session.query(Customer).order_by(Customer.id.asc()).all()


def get_customer(session: Session, customer_id: int) -> Customer:
    customer = session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(session: Session, *, patch: dict) -> Customer:
    name = (patch.get("name") or "").strip()
    if not name:
        raise ValidationError("Name is required")

    customer = Customer(status="active")
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)
    customer.name = name
    if not customer.status:
        customer.status = "active"

    session.add(customer)
    session.commit()
    return customer


def update_customer(session: Session, *, customer_id: int, patch: dict) -> Customer:
    customer = get_customer(session, customer_id)
    if "name" in patch and not (patch["name"] or "").strip():
        raise ValidationError("Name is required")
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)
    session.commit()
    return customer


def delete_customer(session: Session, *, customer_id: int) -> None:
    customer = get_customer(session, customer_id)
    if session.query(Order.id).filter(Order.customer_id == customer.id).first() is not None:
        raise ConflictError("Customer has orders and cannot be deleted")
    session.delete(customer)
    session.commit()
