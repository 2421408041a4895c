from decimal import Decimal

import pytest

from sahl.extensions import db
from sahl.models import Client, Invoice, Product, Transaction
from sahl.services import batch_service
from sahl.services.errors import BatchOperationError, NotFoundError
from sahl.validation import ValidationError


def invoice_row(client_id, balance, number):
    return {
        "invoice_number": number,
        "invoice_type": "sale",
        "client_id": client_id,
        "total": balance,
        "grand_total": balance,
        "balance": balance,
    }


def test_batch_create_invoices_commits_each(make_client):
    client = make_client()
    result = batch_service.batch_create("invoices", [
        invoice_row(client.id, "10", "B-1"),
        invoice_row(client.id, "15", "B-2"),
    ])

    assert len(result.ids) == 2
    assert result.to_dict()["count"] == 2
    assert db.session.get(Client, client.id).balance == Decimal("25.00")


def test_batch_stops_at_first_failure_and_keeps_earlier_records(make_client):
    client = make_client()
    rows = [
        invoice_row(client.id, "10", "B-1"),
        {"invoice_number": "B-2"},
        invoice_row(client.id, "99", "B-3"),
    ]

    with pytest.raises(BatchOperationError) as exc:
        batch_service.batch_create("invoices", rows)

    assert exc.value.index == 1
    assert len(exc.value.completed_ids) == 1
    assert isinstance(exc.value.cause, ValidationError)
    assert db.session.query(Invoice).count() == 1
    assert db.session.get(Client, client.id).balance == Decimal("10.00")


def test_batch_warnings_are_collected(db_session):
    result = batch_service.batch_create("transactions", [
        {"transaction_number": "T-1", "transaction_type": "receipt", "client_id": 901, "amount": "5"},
        {"transaction_number": "T-2", "transaction_type": "payment", "client_id": 902, "amount": "5"},
    ])
    assert len(result.warnings) == 2


def test_batch_update_runs_ledger_path(make_client, make_transaction):
    client = make_client()
    first = make_transaction(client.id, "receipt", amount="10").document
    second = make_transaction(client.id, "receipt", amount="20").document

    batch_service.batch_update("transactions", [
        {"id": first.id, "amount": "1"},
        {"id": second.id, "transaction_type": "payment"},
    ])

    assert db.session.get(Client, client.id).balance == Decimal("19.00")


def test_batch_update_requires_ids(db_session):
    with pytest.raises(ValidationError):
        batch_service.batch_update("clients", [{"name": "no id"}])


def test_batch_delete_reverses_each(make_client, make_invoice):
    client = make_client()
    ids = [make_invoice(client.id, "sale", balance="7").document.id for _ in range(3)]

    result = batch_service.batch_delete("invoices", ids)

    assert result.ids == ids
    assert db.session.get(Client, client.id).balance == Decimal("0.00")


def test_batch_delete_reports_missing_record(make_client, make_transaction):
    client = make_client()
    tx = make_transaction(client.id, "payment", amount="3").document

    with pytest.raises(BatchOperationError) as exc:
        batch_service.batch_delete("transactions", [tx.id, 9999])

    assert exc.value.completed_ids == [tx.id]
    assert isinstance(exc.value.cause, NotFoundError)
    assert db.session.query(Transaction).count() == 0


def test_batch_recode_non_ledger_field(make_product):
    ids = [make_product(category="old").id for _ in range(2)]
    batch_service.batch_recode("products", "category", "new", ids)
    assert {db.session.get(Product, pid).category for pid in ids} == {"new"}


def test_batch_recode_ledger_field_goes_through_reversal(make_client, make_invoice):
    old = make_client()
    new = make_client()
    ids = [make_invoice(old.id, "sale", balance="5").document.id for _ in range(2)]

    batch_service.batch_recode("invoices", "client_id", new.id, ids)

    assert db.session.get(Client, old.id).balance == Decimal("0.00")
    assert db.session.get(Client, new.id).balance == Decimal("10.00")


def test_batch_recode_rejects_protected_fields(make_client):
    client = make_client()
    with pytest.raises(ValidationError):
        batch_service.batch_recode("clients", "balance", "100", [client.id])
    with pytest.raises(ValidationError):
        batch_service.batch_recode("products", "stock_quantity", "1", [])


def test_unknown_entity(db_session):
    with pytest.raises(ValidationError):
        batch_service.batch_create("warehouses", [])
