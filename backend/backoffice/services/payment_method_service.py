# Overview: Service-layer operations for payment methods.

from __future__ import annotations

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import PaymentMethod

DEFAULT_PAYMENT_METHODS = ("Credit Card", "Debit Card", "Cash")


def list_payment_methods(session: Session) -> list[PaymentMethod]:
    return session.query(PaymentMethod).order_by(PaymentMethod.id.asc()).all()


def require_payment_method(session: Session, payment_method_id: int | None) -> int | None:
    """Validate an optional payment method reference used by a settlement."""
    if payment_method_id is None:
        return None
    if session.get(PaymentMethod, payment_method_id) is None:
        raise NotFoundError("Payment method not found")
    return payment_method_id


def create_payment_method(session: Session, *, name: str) -> PaymentMethod:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if session.query(PaymentMethod.id).filter_by(name=name).first() is not None:
        raise ConflictError("Payment method already exists")
    method = PaymentMethod(name=name)
    session.add(method)
    session.commit()
    return method


def seed_payment_methods(session: Session) -> int:
    """
    Ensure the default payment methods exist.

    Safe to call repeatedly (idempotent). Returns the number created.
    """
    created = 0
    for name in DEFAULT_PAYMENT_METHODS:
        if session.query(PaymentMethod.id).filter_by(name=name).first() is None:
            session.add(PaymentMethod(name=name))
            created += 1
    session.commit()
    return created
