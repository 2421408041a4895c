"""
Pytest fixtures for the ledger backend tests.

Provides an in-memory database, a fresh schema per test, the Flask test
client, and small factories for clients, products and documents.
"""

import itertools

import pytest

from sahl import create_app
from sahl.extensions import db
from sahl.services import client_service, invoice_service, product_service, transaction_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LEDGER_MISSING_REFERENCE_POLICY': 'warn',
        'LEDGER_RETRY_ATTEMPTS': 3,
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
def strict_policy(app, monkeypatch):
    """Refuse document writes that reference a missing client/product."""
    monkeypatch.setitem(app.config, 'LEDGER_MISSING_REFERENCE_POLICY', 'strict')


_numbers = itertools.count(1)


@pytest.fixture(scope='function')
def make_client(db_session):
    def _make(**overrides):
        data = {"name": f"Client {next(_numbers)}", "type": "customer", "account_type": "debit"}
        data.update(overrides)
        return client_service.create_client(data)
    return _make


@pytest.fixture(scope='function')
def make_product(db_session):
    def _make(**overrides):
        n = next(_numbers)
        data = {"code": f"P-{n:04d}", "name": f"Product {n}", "sell_price_1": "10.00"}
        data.update(overrides)
        return product_service.create_product(data)
    return _make


@pytest.fixture(scope='function')
def make_invoice(db_session):
    """Create an invoice through the ledger; returns the LedgerResult."""
    def _make(client_id, invoice_type="sale", balance="0", items=None, **overrides):
        data = {
            "invoice_number": f"INV-{next(_numbers):05d}",
            "invoice_type": invoice_type,
            "client_id": client_id,
            "total": balance,
            "grand_total": balance,
            "balance": balance,
        }
        if items is not None:
            data["items"] = items
        data.update(overrides)
        return invoice_service.create_invoice(data)
    return _make


@pytest.fixture(scope='function')
def make_transaction(db_session):
    def _make(client_id, transaction_type="receipt", amount="0", **overrides):
        data = {
            "transaction_number": f"TX-{next(_numbers):05d}",
            "transaction_type": transaction_type,
            "client_id": client_id,
            "amount": amount,
        }
        data.update(overrides)
        return transaction_service.create_transaction(data)
    return _make


def item(product_id, quantity, unit_price="10.00"):
    """Inline invoice item payload."""
    total = str(float(quantity) * float(unit_price))
    return {"product_id": product_id, "quantity": quantity, "unit_price": unit_price, "total": total}
