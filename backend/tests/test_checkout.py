# Overview: Pytest coverage for POS checkout and manual orders.

"""
Sale Settlement Tests

Checkout is all-or-nothing: a short line leaves no Order, OrderItem,
StockMovement or Transaction behind, and no product is decremented.
"""

from decimal import Decimal

import pytest

from backoffice.errors import InsufficientStockError, NotFoundError, ValidationError
from backoffice.models import Order, OrderItem, Product, StockMovement, Transaction
from backoffice.services import sales_service
from backoffice.services.concurrency import decrement_stock_if_available


def _pos_payload(*lines, **extra):
    payload = {
        "kind": "pos_sale",
        "items": [{"product_id": p.id, "quantity": q, "price": str(p.price)} for p, q in lines],
    }
    payload.update(extra)
    return payload


def _row_counts(session):
    return tuple(session.query(m).count() for m in (Order, OrderItem, StockMovement, Transaction))


class TestCheckout:
    def test_checkout_decrements_stock_and_books_income(self, db_session, make_product, cash_method):
        pen = make_product("Pen", in_stock=10, price="1.50")
        pad = make_product("Pad", in_stock=4, price="3.25")

        order = sales_service.checkout(
            db_session,
            payload=_pos_payload((pen, 3), (pad, 2), payment_method_id=cash_method.id),
        )

        assert order.status == "completed"
        assert order.total_amount == Decimal("11.00")
        assert db_session.get(Product, pen.id).in_stock == 7
        assert db_session.get(Product, pad.id).in_stock == 2

        movements = db_session.query(StockMovement).order_by(StockMovement.id).all()
        assert [(m.product_id, m.quantity, m.type) for m in movements] == [
            (pen.id, -3, "sale"),
            (pad.id, -2, "sale"),
        ]
        assert all(m.order_id == order.id for m in movements)

        tx = db_session.query(Transaction).one()
        assert (tx.type, tx.category, tx.status) == ("income", "selling", "completed")
        assert tx.amount == Decimal("11.00")
        assert tx.order_id == order.id
        assert tx.description == f"Payment for order #{order.id}"

    def test_description_includes_cash_and_change(self, db_session, make_product):
        pen = make_product("Pen", in_stock=5, price="2.00")

        order = sales_service.checkout(
            db_session,
            payload=_pos_payload((pen, 1), cash_received="5", change="3"),
        )

        tx = db_session.query(Transaction).one()
        assert tx.description == f"Payment for order #{order.id} | Cash: 5.00 | Change: 3.00"

    def test_explicit_total_is_kept(self, db_session, make_product):
        pen = make_product("Pen", in_stock=5, price="2.00")
        order = sales_service.checkout(db_session, payload=_pos_payload((pen, 2), total="3.50"))
        assert order.total_amount == Decimal("3.50")

    def test_oversell_writes_nothing(self, db_session, make_product):
        scarce = make_product("Scarce", in_stock=1, price="9.99")

        with pytest.raises(InsufficientStockError) as exc:
            sales_service.checkout(db_session, payload=_pos_payload((scarce, 2)))

        assert "Scarce" in str(exc.value)
        assert _row_counts(db_session) == (0, 0, 0, 0)
        assert db_session.get(Product, scarce.id).in_stock == 1

    def test_short_line_aborts_every_line(self, db_session, make_product):
        plenty = make_product("Plenty", in_stock=50)
        scarce = make_product("Scarce", in_stock=1)

        with pytest.raises(InsufficientStockError):
            sales_service.checkout(db_session, payload=_pos_payload((plenty, 5), (scarce, 3)))

        assert db_session.get(Product, plenty.id).in_stock == 50
        assert db_session.get(Product, scarce.id).in_stock == 1
        assert _row_counts(db_session) == (0, 0, 0, 0)

    def test_repeated_product_lines_are_summed(self, db_session, make_product):
        pen = make_product("Pen", in_stock=3)

        with pytest.raises(InsufficientStockError):
            sales_service.checkout(db_session, payload=_pos_payload((pen, 2), (pen, 2)))

        assert db_session.get(Product, pen.id).in_stock == 3

    def test_stock_taken_after_snapshot_aborts_sale(self, db_session, make_product, monkeypatch):
        """
        The pre-check passes on a stale snapshot; the conditional decrement
        still refuses to drive stock negative.
        """
        pen = make_product("Pen", in_stock=1)
        monkeypatch.setattr(sales_service, "_validate_on_hand", lambda lines, products: None)

        with pytest.raises(InsufficientStockError):
            sales_service.checkout(db_session, payload=_pos_payload((pen, 2)))

        assert db_session.get(Product, pen.id).in_stock == 1
        assert _row_counts(db_session) == (0, 0, 0, 0)

    def test_conditional_decrement_reports_affected_rows(self, db_session, make_product):
        pen = make_product("Pen", in_stock=2)

        assert decrement_stock_if_available(db_session, pen.id, 2) is True
        assert decrement_stock_if_available(db_session, pen.id, 1) is False
        db_session.commit()

        assert db_session.get(Product, pen.id).in_stock == 0

    def test_unknown_product_is_not_found(self, db_session):
        payload = {"kind": "pos_sale", "items": [{"product_id": 999, "quantity": 1, "price": 1}]}
        with pytest.raises(NotFoundError):
            sales_service.checkout(db_session, payload=payload)

    @pytest.mark.parametrize("items", [
        [],
        [{"product_id": 1, "quantity": 0, "price": 1}],
        [{"product_id": 1, "quantity": 1.5, "price": 1}],
        [{"product_id": 1, "quantity": 1, "price": -1}],
        [{"product_id": "abc", "quantity": 1, "price": 1}],
    ])
    def test_invalid_lines_are_rejected(self, db_session, items):
        with pytest.raises(ValidationError):
            sales_service.checkout(db_session, payload={"kind": "pos_sale", "items": items})


class TestOrderRoutes:
    def test_pos_sale_via_api(self, client, db_session, make_product, customer):
        pen = make_product("Pen", in_stock=4, price="2.50")

        resp = client.post("/api/orders", json=_pos_payload((pen, 2), customer_id=customer.id))

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["total_amount"] == 5.0
        assert body["customer_name"] == "Jane Buyer"
        assert [i["product_name"] for i in body["items"]] == ["Pen"]

    def test_oversell_via_api_is_409(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=1)

        resp = client.post("/api/orders", json=_pos_payload((pen, 2)))

        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Insufficient stock for Pen"

    def test_missing_kind_is_400(self, client, db_session, make_product):
        pen = make_product("Pen")
        resp = client.post("/api/orders", json={"items": [{"product_id": pen.id, "quantity": 1, "price": 1}]})
        assert resp.status_code == 400
        assert db_session.query(Order).count() == 0

    def test_manual_order_has_no_side_effects(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=4)

        resp = client.post("/api/orders", json={"kind": "manual_order", "total_amount": 12.5})

        assert resp.status_code == 201
        assert resp.get_json()["status"] == "pending"
        assert db_session.get(Product, pen.id).in_stock == 4
        assert db_session.query(Transaction).count() == 0

    def test_update_and_delete_manual_order(self, client, db_session):
        order_id = client.post("/api/orders", json={"kind": "manual_order"}).get_json()["id"]

        resp = client.put(f"/api/orders/{order_id}", json={"status": "completed", "total_amount": "8.40"})
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "completed"
        assert resp.get_json()["total_amount"] == 8.4

        assert client.put(f"/api/orders/{order_id}", json={"status": "shipped"}).status_code == 400

        assert client.delete(f"/api/orders/{order_id}").status_code == 200
        assert client.get(f"/api/orders/{order_id}").status_code == 404

    def test_pos_order_cannot_be_deleted(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=4)
        order_id = client.post("/api/orders", json=_pos_payload((pen, 1))).get_json()["id"]

        resp = client.delete(f"/api/orders/{order_id}")

        assert resp.status_code == 409
        assert db_session.query(Order).count() == 1

    def test_pos_order_cannot_be_modified(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=4, price="2.50")
        order_id = client.post("/api/orders", json=_pos_payload((pen, 2))).get_json()["id"]

        resp = client.put(f"/api/orders/{order_id}", json={"status": "pending", "total_amount": "0.01"})

        assert resp.status_code == 409
        order = db_session.get(Order, order_id)
        assert order.status == "completed"
        assert order.total_amount == Decimal("5.00")
        assert db_session.query(Transaction).one().amount == Decimal("5.00")

    def test_unknown_customer_is_404(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=4)

        resp = client.post("/api/orders", json=_pos_payload((pen, 1), customer_id=999))

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Customer not found"
        assert db_session.get(Product, pen.id).in_stock == 4

    def test_unknown_payment_method_is_404(self, client, db_session, make_product):
        pen = make_product("Pen", in_stock=4)

        resp = client.post("/api/orders", json=_pos_payload((pen, 1), payment_method_id=999))

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Payment method not found"
        assert _row_counts(db_session) == (0, 0, 0, 0)
