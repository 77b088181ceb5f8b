# Overview: Pytest coverage for manual adjustments, the Kardex and its CSV export.

import csv
import io
from datetime import datetime

import pytest

from backoffice.errors import NotFoundError, ValidationError
from backoffice.models import (
    InventoryAdjustment,
    InventoryAdjustmentItem,
    Product,
    StockMovement,
    Transaction,
)
from backoffice.services import inventory_service


class TestAdjustments:
    def test_all_zero_items_rejected(self, db_session, make_product):
        p = make_product("P", in_stock=5)

        with pytest.raises(ValidationError):
            inventory_service.create_adjustment(
                db_session,
                reason="count",
                items=[{"product_id": p.id, "quantity": 0}, {"product_id": p.id, "quantity": "0"}],
            )

        assert db_session.query(InventoryAdjustment).count() == 0
        assert db_session.query(StockMovement).count() == 0

    def test_empty_list_rejected(self, db_session):
        with pytest.raises(ValidationError):
            inventory_service.create_adjustment(db_session, reason=None, items=[])

    def test_mixed_list_applies_valid_items_only(self, db_session, make_product):
        a = make_product("A", in_stock=5)
        b = make_product("B", in_stock=1)

        adjustment = inventory_service.create_adjustment(
            db_session,
            reason="  shrinkage  ",
            items=[
                {"product_id": a.id, "quantity": -2, "note": "broken"},
                {"product_id": b.id, "quantity": 0},
                {"product_id": 0, "quantity": 3},
                {"product_id": b.id, "quantity": "x"},
                {"product_id": b.id, "quantity": -4},
            ],
        )

        assert adjustment.reason == "shrinkage"
        items = db_session.query(InventoryAdjustmentItem).order_by(InventoryAdjustmentItem.id).all()
        assert [(i.product_id, i.quantity, i.note) for i in items] == [
            (a.id, -2, "broken"),
            (b.id, -4, None),
        ]
        assert db_session.get(Product, a.id).in_stock == 3
        # No floor for corrections
        assert db_session.get(Product, b.id).in_stock == -3

        movements = db_session.query(StockMovement).all()
        assert {m.type for m in movements} == {"adjustment"}
        assert all(m.adjustment_id == adjustment.id for m in movements)
        assert db_session.query(Transaction).count() == 0

    def test_unknown_product_is_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            inventory_service.create_adjustment(db_session, reason=None, items=[{"product_id": 5, "quantity": 1}])
        assert db_session.query(InventoryAdjustment).count() == 0

    @pytest.mark.parametrize("reason, note", [("x" * 256, None), ("count", "n" * 256)])
    def test_overlong_text_is_rejected(self, client, db_session, make_product, reason, note):
        p = make_product("P", in_stock=5)

        resp = client.post("/api/inventory/adjustments", json={
            "reason": reason,
            "items": [{"product_id": p.id, "quantity": 1, "note": note}],
        })

        assert resp.status_code == 400
        assert "exceeds max length 255" in resp.get_json()["error"]
        assert db_session.get(Product, p.id).in_stock == 5
        assert db_session.query(InventoryAdjustment).count() == 0

    def test_adjustment_routes(self, client, db_session, make_product):
        p = make_product("P", in_stock=5)

        resp = client.post("/api/inventory/adjustments", json={
            "reason": "recount",
            "items": [{"product_id": p.id, "quantity": 2}],
        })
        assert resp.status_code == 201
        assert resp.get_json()["items"][0]["quantity"] == 2

        resp = client.post("/api/inventory/adjustments", json={"items": [{"product_id": p.id, "quantity": 0}]})
        assert resp.status_code == 400

        listed = client.get("/api/inventory/adjustments").get_json()
        assert len(listed) == 1
        assert listed[0]["reason"] == "recount"


class TestKardex:
    def _movement(self, session, product, quantity, type_, created_at, **refs):
        m = StockMovement(product_id=product.id, quantity=quantity, type=type_, created_at=created_at, **refs)
        session.add(m)
        session.commit()
        return m

    def test_filters_and_order(self, db_session, make_product):
        a = make_product("A", barcode="111")
        b = make_product("B")
        self._movement(db_session, a, 5, "purchase", datetime(2026, 3, 1, 9, 0), purchase_id=None)
        self._movement(db_session, a, -1, "sale", datetime(2026, 3, 2, 23, 30))
        self._movement(db_session, b, 2, "adjustment", datetime(2026, 3, 3, 8, 0))

        everything = inventory_service.list_movements(db_session)
        assert [m.quantity for m in everything] == [2, -1, 5]

        only_a = inventory_service.list_movements(db_session, product_id=a.id)
        assert [m.quantity for m in only_a] == [-1, 5]

        sales = inventory_service.list_movements(db_session, movement_type="sale")
        assert [m.type for m in sales] == ["sale"]

        # A date-only upper bound includes the whole day
        through_day_two = inventory_service.list_movements(db_session, start="2026-03-02", end="2026-03-02")
        assert [m.quantity for m in through_day_two] == [-1]

    def test_invalid_filters(self, db_session):
        with pytest.raises(ValidationError):
            inventory_service.list_movements(db_session, movement_type="transfer")
        with pytest.raises(ValidationError):
            inventory_service.list_movements(db_session, start="yesterday")

    def test_movements_route_and_export(self, client, db_session, make_product):
        a = make_product("Alpha", barcode="777")
        self._movement(db_session, a, -2, "sale", datetime(2026, 5, 10, 12, 0), order_id=None)

        resp = client.get(f"/api/inventory/movements?productId={a.id}&type=sale")
        assert resp.status_code == 200
        row = resp.get_json()[0]
        assert row["product_name"] == "Alpha"
        assert row["product_barcode"] == "777"

        assert client.get("/api/inventory/movements?productId=abc").status_code == 400

        resp = client.get("/api/inventory/movements/export")
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "attachment" in resp.headers["Content-Disposition"]

        rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
        assert rows[0][:3] == ["date", "product_id", "product"]
        assert rows[1][2] == "Alpha"
        assert rows[1][5] == "-2"
