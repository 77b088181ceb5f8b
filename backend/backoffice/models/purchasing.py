from __future__ import annotations

from ..extensions import db
from ..money import to_number
from backoffice.time_utils import to_utc_z, to_iso_date

PAYMENT_TERMS = {"cash", "credit"}

PAYABLE_OPEN = "open"
PAYABLE_PAID = "paid"
PAYABLE_CANCELLED = "cancelled"


class Purchase(db.Model):
    __tablename__ = "purchases"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="completed")
    payment_term = db.Column(db.String(16), nullable=False, default="cash")
    due_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    supplier = db.relationship("Supplier", backref=db.backref("purchases", lazy=True))
    items = db.relationship("PurchaseItem", backref="purchase", lazy=True, order_by="PurchaseItem.id")

    def __repr__(self) -> str:
        return f"<Purchase id={self.id} supplier_id={self.supplier_id} total={self.total_amount}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier.name if self.supplier else None,
            "total_amount": to_number(self.total_amount),
            "status": self.status,
            "payment_term": self.payment_term,
            "due_date": to_iso_date(self.due_date),
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class PurchaseItem(db.Model):
    __tablename__ = "purchase_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "purchase_id": self.purchase_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": to_number(self.price),
        }


class Payable(db.Model):
    """
    Supplier obligation opened by a credit purchase.

    balance only decreases (through PayablePayment rows); status flips to
    'paid' once balance is within SETTLEMENT_EPSILON of zero.
    """
    __tablename__ = "payables"
    __table_args__ = (
        db.Index("ix_payables_status_due", "status", "due_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=True, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    balance = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=PAYABLE_OPEN)
    due_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    supplier = db.relationship("Supplier", backref=db.backref("payables", lazy=True))
    purchase = db.relationship("Purchase", backref=db.backref("payable", uselist=False))
    payments = db.relationship("PayablePayment", backref="payable", lazy=True, order_by="PayablePayment.id")

    def __repr__(self) -> str:
        return f"<Payable id={self.id} status={self.status} balance={self.balance}>"

    def to_dict(self, include_payments: bool = True) -> dict:
        data = {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier.name if self.supplier else None,
            "purchase_id": self.purchase_id,
            "amount": to_number(self.amount),
            "balance": to_number(self.balance),
            "status": self.status,
            "due_date": to_iso_date(self.due_date),
            "created_at": to_utc_z(self.created_at),
        }
        if include_payments:
            data["payments"] = [p.to_dict() for p in self.payments]
        return data


class PayablePayment(db.Model):
    __tablename__ = "payable_payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    payable_id = db.Column(db.Integer, db.ForeignKey("payables.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method_id = db.Column(db.Integer, db.ForeignKey("payment_methods.id"), nullable=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payable_id": self.payable_id,
            "amount": to_number(self.amount),
            "payment_method_id": self.payment_method_id,
            "paid_at": to_utc_z(self.paid_at),
        }
