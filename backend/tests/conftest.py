"""
Pytest fixtures for back-office backend tests.

Provides an in-memory database, a test client, and small factories for the
catalog rows most tests start from.
"""

from datetime import date
from decimal import Decimal

import pytest
from backoffice import create_app
from backoffice.extensions import db
from backoffice.models import Customer, Payable, PaymentMethod, Product, Supplier


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOW_STOCK_THRESHOLD': 10,
        'PAYABLE_DUE_SOON_DAYS': 7,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(name, in_stock=..., price=..., barcode=...)."""
    def _make(name="Widget", *, in_stock=10, price="5.00", barcode=None, category=None):
        product = Product(
            name=name,
            in_stock=in_stock,
            price=Decimal(price),
            barcode=barcode,
            category=category,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def supplier(db_session):
    """Create a supplier."""
    s = Supplier(name="Acme Wholesale", status="active")
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture(scope='function')
def customer(db_session):
    """Create a customer."""
    c = Customer(name="Jane Buyer", status="active")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture(scope='function')
def cash_method(db_session):
    """Create the Cash payment method."""
    method = PaymentMethod(name="Cash")
    db_session.add(method)
    db_session.commit()
    return method


@pytest.fixture(scope='function')
def make_payable(db_session, supplier):
    """Factory: an open payable with amount = balance."""
    def _make(amount="100.00", *, due_date: date | None = None):
        payable = Payable(
            supplier_id=supplier.id,
            amount=Decimal(amount),
            balance=Decimal(amount),
            status="open",
            due_date=due_date,
        )
        db_session.add(payable)
        db_session.commit()
        return payable
    return _make
