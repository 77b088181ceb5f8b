# Overview: Pytest coverage for purchase intake and payable settlement.

from datetime import date
from decimal import Decimal

import pytest

from backoffice.errors import ConflictError, NotFoundError, OverpaymentError, ValidationError
from backoffice.models import Payable, PayablePayment, Product, Purchase, StockMovement, Transaction
from backoffice.services import payable_service, purchase_service


class TestPurchaseIntake:
    def test_credit_purchase_opens_payable(self, db_session, make_product, supplier):
        box = make_product("Box", in_stock=2)

        purchase = purchase_service.create_purchase(db_session, payload={
            "supplier_id": supplier.id,
            "payment_term": "credit",
            "due_date": "2026-11-30",
            "items": [{"product_id": box.id, "quantity": 10, "price": "5.00"}],
        })

        assert purchase.total_amount == Decimal("50.00")
        assert purchase.payment_term == "credit"
        assert db_session.get(Product, box.id).in_stock == 12

        payable = db_session.query(Payable).one()
        assert payable.amount == Decimal("50.00")
        assert payable.balance == Decimal("50.00")
        assert payable.status == "open"
        assert payable.due_date == date(2026, 11, 30)
        assert payable.purchase_id == purchase.id

        assert db_session.query(Transaction).count() == 0

    def test_cash_purchase_books_expense(self, db_session, make_product, supplier, cash_method):
        a = make_product("A", in_stock=0)
        b = make_product("B", in_stock=1)

        purchase = purchase_service.create_purchase(db_session, payload={
            "supplier_id": supplier.id,
            "payment_method_id": cash_method.id,
            "items": [
                {"product_id": a.id, "quantity": 3, "price": 1.1},
                {"product_id": b.id, "quantity": 2, "price": "0.35"},
            ],
        })

        assert purchase.payment_term == "cash"
        assert purchase.total_amount == Decimal("4.00")
        assert db_session.get(Product, a.id).in_stock == 3
        assert db_session.get(Product, b.id).in_stock == 3

        movements = db_session.query(StockMovement).order_by(StockMovement.id).all()
        assert [(m.quantity, m.type, m.unit_cost) for m in movements] == [
            (3, "purchase", Decimal("1.10")),
            (2, "purchase", Decimal("0.35")),
        ]

        tx = db_session.query(Transaction).one()
        assert (tx.type, tx.category) == ("expense", "purchase")
        assert tx.description == f"Purchase #{purchase.id}"
        assert tx.amount == Decimal("4.00")
        assert db_session.query(Payable).count() == 0

    def test_bad_line_rolls_back_everything(self, db_session, make_product, supplier):
        box = make_product("Box", in_stock=2)

        with pytest.raises(NotFoundError):
            purchase_service.create_purchase(db_session, payload={
                "supplier_id": supplier.id,
                "items": [
                    {"product_id": box.id, "quantity": 1, "price": 1},
                    {"product_id": 4242, "quantity": 1, "price": 1},
                ],
            })

        assert db_session.get(Product, box.id).in_stock == 2
        assert db_session.query(Purchase).count() == 0
        assert db_session.query(StockMovement).count() == 0

    @pytest.mark.parametrize("payload", [
        {"items": [{"product_id": 1, "quantity": 1, "price": 1}]},
        {"supplier_id": 1, "items": []},
        {"supplier_id": 1, "items": [{"product_id": 1, "quantity": -2, "price": 1}]},
        {"supplier_id": 1, "items": [{"product_id": 1, "quantity": 1, "price": "x"}]},
        {"supplier_id": 1, "payment_term": "barter", "items": [{"product_id": 1, "quantity": 1, "price": 1}]},
    ])
    def test_invalid_payloads(self, db_session, payload):
        with pytest.raises(ValidationError):
            purchase_service.create_purchase(db_session, payload=payload)

    def test_unknown_supplier(self, db_session, make_product):
        box = make_product("Box")
        with pytest.raises(NotFoundError):
            purchase_service.create_purchase(db_session, payload={
                "supplier_id": 77,
                "items": [{"product_id": box.id, "quantity": 1, "price": 1}],
            })

    def test_purchase_routes(self, client, db_session, make_product, supplier):
        box = make_product("Box", in_stock=0)

        resp = client.post("/api/purchases", json={
            "supplier_id": supplier.id,
            "payment_term": "credit",
            "items": [{"product_id": box.id, "quantity": 4, "price": 2.5}],
        })
        assert resp.status_code == 201
        purchase_id = resp.get_json()["id"]

        listed = client.get("/api/purchases").get_json()
        assert [p["supplier_name"] for p in listed] == ["Acme Wholesale"]

        detail = client.get(f"/api/purchases/{purchase_id}").get_json()
        assert detail["total_amount"] == 10.0
        assert detail["items"][0]["quantity"] == 4


class TestPayableSettlement:
    def test_full_payment_settles(self, db_session, make_payable, cash_method):
        payable = make_payable("100.00")

        payment, settled = payable_service.record_payment(
            db_session,
            payable_id=payable.id,
            payload={"amount": "100.00", "payment_method_id": cash_method.id},
        )

        assert settled.balance == Decimal("0.00")
        assert settled.status == "paid"
        assert payment.amount == Decimal("100.00")
        assert db_session.query(PayablePayment).count() == 1

        tx = db_session.query(Transaction).one()
        assert (tx.type, tx.category) == ("expense", "payable_payment")
        assert tx.description == f"Payable payment #{payable.id} - Acme Wholesale"

    def test_partial_payments_track_balance(self, db_session, make_payable):
        payable = make_payable("100.00")

        payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": 30})
        _, after = payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": "69.995"})

        # 69.995 rounds half-up to 70.00
        assert after.balance == Decimal("0.00")
        assert after.status == "paid"
        assert db_session.query(PayablePayment).count() == 2
        # No payment method: no ledger row
        assert db_session.query(Transaction).count() == 0

    def test_remaining_cent_counts_as_paid(self, db_session, make_payable):
        payable = make_payable("10.00")
        _, after = payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": "9.99"})
        assert after.balance == Decimal("0.01")
        assert after.status == "paid"

    def test_overpayment_leaves_balance(self, db_session, make_payable):
        payable = make_payable("50.00")

        with pytest.raises(OverpaymentError):
            payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": "50.01"})

        refreshed = db_session.get(Payable, payable.id)
        assert refreshed.balance == Decimal("50.00")
        assert refreshed.status == "open"
        assert db_session.query(PayablePayment).count() == 0

    @pytest.mark.parametrize("amount", [0, -5, "abc", None])
    def test_non_positive_amount_rejected(self, db_session, make_payable, amount):
        payable = make_payable("20.00")
        with pytest.raises(ValidationError):
            payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": amount})

    def test_paid_payable_rejects_more_payments(self, db_session, make_payable):
        payable = make_payable("5.00")
        payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": 5})

        with pytest.raises(ConflictError):
            payable_service.record_payment(db_session, payable_id=payable.id, payload={"amount": 1})

    def test_cancel_only_unpaid(self, db_session, make_payable):
        untouched = make_payable("5.00")
        partly_paid = make_payable("5.00")
        payable_service.record_payment(db_session, payable_id=partly_paid.id, payload={"amount": 1})

        assert payable_service.cancel_payable(db_session, payable_id=untouched.id).status == "cancelled"
        with pytest.raises(ConflictError):
            payable_service.cancel_payable(db_session, payable_id=partly_paid.id)

    def test_payment_routes(self, client, db_session, make_payable):
        payable = make_payable("80.00", due_date=date(2026, 12, 1))

        resp = client.post(f"/api/payables/{payable.id}/payments", json={"amount": 100})
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Payment amount exceeds balance"

        resp = client.post(f"/api/payables/{payable.id}/payments", json={"amount": 0})
        assert resp.status_code == 400

        resp = client.post(f"/api/payables/{payable.id}/payments", json={"amount": 30})
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["payable"]["balance"] == 50.0
        assert body["payable"]["supplier_name"] == "Acme Wholesale"
        assert len(body["payable"]["payments"]) == 1

        assert client.post("/api/payables/999/payments", json={"amount": 1}).status_code == 404

        listed = client.get("/api/payables").get_json()
        assert listed[0]["due_date"] == "2026-12-01"
