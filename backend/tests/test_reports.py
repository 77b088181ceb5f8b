# Overview: Pytest coverage for ledger aggregates, stock report and notifications.

import csv
import io
from datetime import date, datetime, timedelta
from decimal import Decimal

from backoffice.models import Transaction
from backoffice.services import notification_service, reporting_service
from backoffice.time_utils import utcnow


def _tx(session, amount, type_, category, day, status="completed"):
    session.add(Transaction(
        amount=Decimal(amount),
        type=type_,
        category=category,
        status=status,
        created_at=datetime.combine(day, datetime.min.time()) + timedelta(hours=12),
    ))
    session.commit()


class TestLedgerAggregates:
    def test_totals_and_categories(self, db_session):
        d = date(2026, 4, 1)
        _tx(db_session, "100.00", "income", "selling", d)
        _tx(db_session, "15.50", "income", "other", d)
        _tx(db_session, "40.00", "expense", "purchase", d)
        _tx(db_session, "10.00", "expense", "payable_payment", d)
        _tx(db_session, "999.00", "income", "selling", d, status="cancelled")

        assert reporting_service.total_revenue(db_session) == Decimal("115.50")
        assert reporting_service.total_expenses(db_session) == Decimal("50.00")
        # Profit counts selling income only
        assert reporting_service.total_profit(db_session) == Decimal("50.00")
        assert reporting_service.revenue_by_category(db_session) == {"other": 15.5, "selling": 100.0}
        assert reporting_service.expenses_by_category(db_session) == {"payable_payment": 10.0, "purchase": 40.0}

    def test_margin_per_day(self, db_session):
        _tx(db_session, "200.00", "income", "selling", date(2026, 4, 1))
        _tx(db_session, "50.00", "expense", "purchase", date(2026, 4, 1))
        _tx(db_session, "30.00", "expense", None, date(2026, 4, 2))
        _tx(db_session, "3.00", "income", "selling", date(2026, 4, 3))
        _tx(db_session, "1.00", "expense", "purchase", date(2026, 4, 3))

        series = reporting_service.profit_margin_series(db_session)

        assert series == [
            {"date": "2026-04-01", "margin": 75.0},
            {"date": "2026-04-02", "margin": 0.0},
            {"date": "2026-04-03", "margin": 66.67},
        ]

    def test_cash_flow_per_day(self, db_session):
        _tx(db_session, "80.00", "income", "selling", date(2026, 4, 1))
        _tx(db_session, "30.00", "expense", "purchase", date(2026, 4, 1))
        _tx(db_session, "20.00", "expense", "purchase", date(2026, 4, 2))

        assert reporting_service.cash_flow_series(db_session) == [
            {"date": "2026-04-01", "inflow": 80.0, "outflow": 30.0, "net": 50.0},
            {"date": "2026-04-02", "inflow": 0.0, "outflow": 20.0, "net": -20.0},
        ]

    def test_admin_routes(self, client, db_session):
        _tx(db_session, "10.00", "income", "selling", date(2026, 4, 1))
        _tx(db_session, "4.00", "expense", "purchase", date(2026, 4, 1))

        assert client.get("/api/admin/revenue/total").get_json() == {"total_revenue": 10.0}
        assert client.get("/api/admin/expenses/total").get_json() == {"total_expenses": 4.0}
        assert client.get("/api/admin/profit/total").get_json() == {"total_profit": 6.0}
        assert client.get("/api/admin/revenue/category").get_json() == {"revenue_by_category": {"selling": 10.0}}
        assert client.get("/api/admin/expenses/category").get_json() == {"expenses_by_category": {"purchase": 4.0}}
        assert client.get("/api/admin/profit/margin").get_json()["profit_margin"] == [
            {"date": "2026-04-01", "margin": 60.0},
        ]
        assert client.get("/api/admin/cashflow").get_json()["cash_flow"][0]["net"] == 6.0

    def test_empty_ledger(self, client, db_session):
        assert client.get("/api/admin/revenue/total").get_json() == {"total_revenue": 0.0}
        assert client.get("/api/admin/profit/margin").get_json() == {"profit_margin": []}


class TestStockReport:
    def test_report_and_threshold(self, client, db_session, make_product):
        make_product("Bolt", in_stock=3, price="0.25")
        make_product("Anvil", in_stock=20, price="100.00")

        body = client.get("/api/reports/stock?threshold=5").get_json()

        assert [p["name"] for p in body["products"]] == ["Anvil", "Bolt"]
        assert [p["low_stock"] for p in body["products"]] == [False, True]
        assert body["products"][1]["stock_value"] == 0.75
        assert body["total_value"] == 2000.75
        assert body["low_stock_count"] == 1

        assert client.get("/api/reports/stock?threshold=-1").status_code == 400
        # Default threshold comes from LOW_STOCK_THRESHOLD (10)
        assert client.get("/api/reports/stock").get_json()["threshold"] == 10

    def test_export(self, client, db_session, make_product):
        make_product("Bolt", in_stock=3, price="0.25", barcode="B-1")

        resp = client.get("/api/reports/stock/export")

        assert resp.mimetype == "text/csv"
        rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
        assert rows[0][0] == "product_id"
        assert rows[1][1:3] == ["Bolt", "B-1"]
        assert rows[1][6] == "0.75"
        assert rows[-1][0] == "total_value"


class TestNotifications:
    def test_priorities_and_summary(self, db_session, make_product, make_payable):
        today = utcnow().date()
        make_product("Empty", in_stock=0)
        make_product("Few", in_stock=3)
        make_product("Some", in_stock=8)
        make_product("Plenty", in_stock=50)

        overdue = make_payable("40.00", due_date=today - timedelta(days=3))
        urgent = make_payable("10.00", due_date=today + timedelta(days=1))
        later = make_payable("10.00", due_date=today + timedelta(days=6))
        make_payable("10.00", due_date=today + timedelta(days=30))
        settled = make_payable("10.00", due_date=today - timedelta(days=1))
        settled.status = "paid"
        db_session.commit()

        result = notification_service.build_notifications(
            db_session, low_stock_threshold=10, due_soon_days=7, today=today,
        )

        by_id = {n["id"]: n for n in result["notifications"]}
        assert f"overdue_{settled.id}" not in by_id
        priorities = [n["priority"] for n in result["notifications"]]
        assert priorities == sorted(priorities, key=notification_service.PRIORITY_RANK.get)

        assert by_id[f"overdue_{overdue.id}"]["priority"] == "high"
        assert by_id[f"due_{urgent.id}"]["priority"] == "high"
        assert by_id[f"due_{later.id}"]["priority"] == "medium"
        assert by_id[f"due_{later.id}"]["data"]["days_until_due"] == 6

        stock = {n["data"]["name"]: n["priority"] for n in result["notifications"] if n["type"] == "low_stock"}
        assert stock == {"Empty": "high", "Few": "medium", "Some": "low"}

        assert result["summary"] == {
            "low_stock_count": 3,
            "overdue_payables_count": 1,
            "due_soon_payables_count": 2,
            "total_count": 6,
        }

    def test_route_uses_config(self, client, db_session, make_product):
        make_product("Eleven", in_stock=11)
        make_product("Ten", in_stock=10)

        body = client.get("/api/notifications").get_json()

        assert [n["data"]["name"] for n in body["notifications"]] == ["Ten"]
        assert body["summary"]["total_count"] == 1
