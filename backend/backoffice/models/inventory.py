from __future__ import annotations

from ..extensions import db
from ..money import to_number
from backoffice.time_utils import to_utc_z

MOVEMENT_SALE = "sale"
MOVEMENT_PURCHASE = "purchase"
MOVEMENT_ADJUSTMENT = "adjustment"
MOVEMENT_TYPES = {MOVEMENT_SALE, MOVEMENT_PURCHASE, MOVEMENT_ADJUSTMENT}


class InventoryAdjustment(db.Model):
    __tablename__ = "inventory_adjustments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    reason = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    items = db.relationship(
        "InventoryAdjustmentItem",
        backref="adjustment",
        lazy=True,
        order_by="InventoryAdjustmentItem.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reason": self.reason,
            "created_at": to_utc_z(self.created_at),
            "items": [item.to_dict() for item in self.items],
        }


class InventoryAdjustmentItem(db.Model):
    __tablename__ = "inventory_adjustment_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    adjustment_id = db.Column(db.Integer, db.ForeignKey("inventory_adjustments.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    note = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "adjustment_id": self.adjustment_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "note": self.note,
        }


class StockMovement(db.Model):
    """
    Append-only audit trail of in_stock changes (the Kardex).

    quantity is the signed delta applied to Product.in_stock. Exactly one of
    order_id / purchase_id / adjustment_id is set, matching type.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product_created", "product_id", "created_at"),
        db.Index("ix_stock_movements_type_created", "type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    type = db.Column(db.String(16), nullable=False)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=True, index=True)
    adjustment_id = db.Column(db.Integer, db.ForeignKey("inventory_adjustments.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")

    def reference(self) -> str:
        if self.order_id:
            return f"Order #{self.order_id}"
        if self.purchase_id:
            return f"Purchase #{self.purchase_id}"
        if self.adjustment_id:
            return f"Adjustment #{self.adjustment_id}"
        return ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "product_barcode": self.product.barcode if self.product else None,
            "quantity": self.quantity,
            "type": self.type,
            "unit_cost": to_number(self.unit_cost),
            "order_id": self.order_id,
            "purchase_id": self.purchase_id,
            "adjustment_id": self.adjustment_id,
            "reference": self.reference(),
            "created_at": to_utc_z(self.created_at),
        }
