from __future__ import annotations

from ..extensions import db
from ..money import to_number
from backoffice.time_utils import to_utc_z

TYPE_INCOME = "income"
TYPE_EXPENSE = "expense"
TRANSACTION_TYPES = {TYPE_INCOME, TYPE_EXPENSE}

CATEGORY_SELLING = "selling"
CATEGORY_PURCHASE = "purchase"
CATEGORY_PAYABLE_PAYMENT = "payable_payment"

STATUS_COMPLETED = "completed"
TRANSACTION_STATUSES = {STATUS_COMPLETED, "pending", "cancelled"}


class Transaction(db.Model):
    """
    Financial ledger row: one income or expense event.

    Settlements append rows here in the same DB transaction as the domain
    change they record. Reports aggregate over status='completed' rows only.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_type_status", "type", "status"),
        db.Index("ix_transactions_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    type = db.Column(db.String(16), nullable=False)
    category = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=STATUS_COMPLETED)
    description = db.Column(db.String(255), nullable=True)
    payment_method_id = db.Column(db.Integer, db.ForeignKey("payment_methods.id"), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} {self.type}/{self.category} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": to_number(self.amount),
            "type": self.type,
            "category": self.category,
            "status": self.status,
            "description": self.description,
            "payment_method_id": self.payment_method_id,
            "order_id": self.order_id,
            "purchase_id": self.purchase_id,
            "created_at": to_utc_z(self.created_at),
        }
