# Overview: Service-layer operations for supplier payables; encapsulates business logic and database work.

"""
Payable Service

A Payable is opened by a credit purchase with amount = balance = total.

Settlement rules:
- A payment must be > 0 and <= the current balance (no overpayment).
- balance = balance - amount, always in Decimal.
- status becomes 'paid' once balance <= SETTLEMENT_EPSILON, else stays 'open'.
- When a payment method is given, the payment is booked as an
  expense/payable_payment ledger row in the same transaction.
- Only 'open' payables accept payments; 'cancelled' is terminal.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from ..errors import ConflictError, NotFoundError, OverpaymentError, ValidationError
from ..models import Payable, PayablePayment
from ..models.ledger import CATEGORY_PAYABLE_PAYMENT, TYPE_EXPENSE
from ..models.purchasing import PAYABLE_CANCELLED, PAYABLE_OPEN, PAYABLE_PAID
from ..money import SETTLEMENT_EPSILON, as_money, parse_money
from ..validation import optional_id
from .concurrency import atomic, lock_for_update
from .ledger_service import append_transaction
from .payment_method_service import require_payment_method


def list_payables(session: Session) -> list[Payable]:
    return (
        session.query(Payable)
        .options(joinedload(Payable.payments), joinedload(Payable.supplier))
        .order_by(Payable.created_at.desc(), Payable.id.desc())
        .all()
    )


def get_payable(session: Session, payable_id: int) -> Payable:
    payable = session.get(Payable, payable_id)
    if payable is None:
        raise NotFoundError("Payable not found")
    return payable


def settled_status(balance) -> str:
    return PAYABLE_PAID if balance <= SETTLEMENT_EPSILON else PAYABLE_OPEN


def record_payment(session: Session, *, payable_id: int, payload: dict) -> tuple[PayablePayment, Payable]:
    """
    Pay (part of) a payable.

    Returns:
        (payment, payable) after commit

    Raises:
        ValidationError: amount <= 0 or malformed
        NotFoundError: unknown payable
        OverpaymentError: amount > current balance (balance unchanged)
        ConflictError: payable is not open
    """
    amount = parse_money(payload.get("amount"), "amount", allow_negative=True)
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    payment_method_id = optional_id(payload.get("payment_method_id"), "payment_method_id")

    with atomic(session):
        payable = lock_for_update(session.query(Payable).filter_by(id=payable_id)).first()
        if payable is None:
            raise NotFoundError("Payable not found")
        if payable.status != PAYABLE_OPEN:
            raise ConflictError(f"Payable is {payable.status}")

        balance = as_money(payable.balance)
        if amount > balance:
            raise OverpaymentError(details={"balance": float(balance), "amount": float(amount)})

        require_payment_method(session, payment_method_id)

        payment = PayablePayment(
            payable_id=payable.id,
            amount=amount,
            payment_method_id=payment_method_id,
        )
        session.add(payment)

        new_balance = balance - amount
        payable.balance = new_balance
        payable.status = settled_status(new_balance)

        if payment_method_id is not None:
            append_transaction(
                session,
                amount=amount,
                type=TYPE_EXPENSE,
                category=CATEGORY_PAYABLE_PAYMENT,
                description=f"Payable payment #{payable.id} - {payable.supplier.name}",
                payment_method_id=payment_method_id,
                purchase_id=payable.purchase_id,
            )

    return payment, payable


def cancel_payable(session: Session, *, payable_id: int) -> Payable:
    """Cancel an open payable that has not received any payment."""
    with atomic(session):
        payable = lock_for_update(session.query(Payable).filter_by(id=payable_id)).first()
        if payable is None:
            raise NotFoundError("Payable not found")
        if payable.status != PAYABLE_OPEN:
            raise ConflictError(f"Payable is {payable.status}")
        if payable.payments:
            raise ConflictError("Payable has payments and cannot be cancelled")
        payable.status = PAYABLE_CANCELLED
    return payable
