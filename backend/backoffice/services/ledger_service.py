# Overview: Service-layer operations for the financial ledger; encapsulates business logic and database work.

"""
Ledger invariants (authoritative)

- Settlement procedures append rows in the same DB transaction as the domain
  change they record (sale -> income/selling, cash purchase -> expense/purchase,
  payable payment -> expense/payable_payment).
- Settlements never update or delete ledger rows. Manual rows created through
  the API may be edited or removed by back-office staff; rows linked to an
  order or purchase, or in a settlement category, refuse both (409).
- Reports only aggregate status='completed' rows.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Transaction
from ..models.ledger import (
    CATEGORY_PAYABLE_PAYMENT,
    CATEGORY_PURCHASE,
    CATEGORY_SELLING,
    STATUS_COMPLETED,
    TRANSACTION_TYPES,
)
from .payment_method_service import require_payment_method

SETTLEMENT_CATEGORIES = {CATEGORY_SELLING, CATEGORY_PURCHASE, CATEGORY_PAYABLE_PAYMENT}

TRANSACTION_MUTABLE_FIELDS = {"amount", "type", "category", "status", "description", "payment_method_id"}


def append_transaction(
    session: Session,
    *,
    amount: Decimal,
    type: str,
    category: str | None,
    description: str | None = None,
    payment_method_id: int | None = None,
    order_id: int | None = None,
    purchase_id: int | None = None,
    status: str = STATUS_COMPLETED,
) -> Transaction:
    """
    Append a ledger row. No commit: callers own the transaction scope.
    """
    if type not in TRANSACTION_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(sorted(TRANSACTION_TYPES))}")

    tx = Transaction(
        amount=amount,
        type=type,
        category=category,
        status=status,
        description=description,
        payment_method_id=payment_method_id,
        order_id=order_id,
        purchase_id=purchase_id,
    )
    session.add(tx)
    session.flush()  # ensures tx.id is assigned without committing
    return tx


def is_settlement_row(tx: Transaction) -> bool:
    """Rows posted by a sale, purchase or payable payment rather than by hand."""
    return tx.order_id is not None or tx.purchase_id is not None or tx.category in SETTLEMENT_CATEGORIES


def _require_manual(tx: Transaction) -> None:
    if is_settlement_row(tx):
        raise ConflictError("Settlement ledger rows are append-only")


def list_transactions(session: Session) -> list[Transaction]:
    return session.query(Transaction).order_by(Transaction.id.asc()).all()


def get_transaction(session: Session, transaction_id: int) -> Transaction:
    tx = session.get(Transaction, transaction_id)
    if tx is None:
        raise NotFoundError("Transaction not found")
    return tx


def create_transaction(session: Session, *, patch: dict) -> Transaction:
    require_payment_method(session, patch.get("payment_method_id"))
    tx = append_transaction(
        session,
        amount=patch["amount"],
        type=patch["type"],
        category=patch.get("category"),
        description=patch.get("description"),
        payment_method_id=patch.get("payment_method_id"),
        status=patch.get("status") or STATUS_COMPLETED,
    )
    session.commit()
    return tx


def update_transaction(session: Session, *, transaction_id: int, patch: dict) -> Transaction:
    tx = get_transaction(session, transaction_id)
    _require_manual(tx)
    if patch.get("payment_method_id") is not None:
        require_payment_method(session, patch["payment_method_id"])
    for k, v in patch.items():
        if k in TRANSACTION_MUTABLE_FIELDS:
            setattr(tx, k, v)
    session.commit()
    return tx


def delete_transaction(session: Session, *, transaction_id: int) -> None:
    tx = get_transaction(session, transaction_id)
    _require_manual(tx)
    session.delete(tx)
    session.commit()
