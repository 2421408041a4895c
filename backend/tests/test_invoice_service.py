"""Invoice and invoice-item lifecycle against client balance and product stock."""

from decimal import Decimal

import pytest

from conftest import item
from sahl.extensions import db
from sahl.models import Client, Invoice, InvoiceItem, Product
from sahl.services import invoice_service, warehouse_service
from sahl.services.errors import NotFoundError
from sahl.validation import ValidationError


def balance_of(client_id):
    return db.session.get(Client, client_id).balance


def stock_of(product_id):
    return db.session.get(Product, product_id).stock_quantity


@pytest.mark.parametrize("invoice_type,expected", [
    ("sale", Decimal("300.00")),
    ("purchase", Decimal("-300.00")),
    ("sale_return", Decimal("-300.00")),
    ("purchase_return", Decimal("300.00")),
])
def test_create_invoice_moves_balance_by_type(make_client, make_invoice, invoice_type, expected):
    client = make_client()
    make_invoice(client.id, invoice_type, balance="300")
    assert balance_of(client.id) == expected


def test_create_invoice_with_inline_items_moves_stock(make_client, make_product, make_invoice):
    client = make_client()
    a = make_product(opening_quantity="100")
    b = make_product(opening_quantity="20")

    result = make_invoice(client.id, "sale", balance="90", items=[item(a.id, "7"), item(b.id, "2")])

    assert result.warnings == []
    assert len(result.document.items) == 2
    assert stock_of(a.id) == Decimal("93.00")
    assert stock_of(b.id) == Decimal("18.00")
    assert balance_of(client.id) == Decimal("90.00")


def test_purchase_items_add_stock(make_client, make_product, make_invoice):
    supplier = make_client(type="supplier", account_type="credit")
    product = make_product()
    make_invoice(supplier.id, "purchase", balance="500", items=[item(product.id, "50")])
    assert stock_of(product.id) == Decimal("50.00")
    assert balance_of(supplier.id) == Decimal("-500.00")


def test_create_invoice_accepts_arabic_type(make_client, make_invoice):
    client = make_client()
    result = make_invoice(client.id, "مرتجع بيع", balance="25")
    assert result.document.invoice_type == "sale_return"
    assert balance_of(client.id) == Decimal("-25.00")


def test_create_invoice_defaults(make_client, make_invoice):
    warehouse = warehouse_service.ensure_default_warehouse()
    client = make_client()
    invoice = make_invoice(client.id, balance="10").document
    assert invoice.warehouse_id == warehouse.id
    assert invoice.discount == Decimal("0.00")
    assert invoice.date is not None and invoice.time is not None


def test_create_invoice_validation_writes_nothing(make_client, make_product):
    client = make_client()
    product = make_product(opening_quantity="10")
    with pytest.raises(ValidationError):
        invoice_service.create_invoice({
            "invoice_number": "BAD-1",
            "invoice_type": "sale",
            "client_id": client.id,
            "total": "10",
            "grand_total": "10",
            "balance": "10",
            "items": [item(product.id, "1"), {"product_id": product.id}],
        })
    assert db.session.query(Invoice).count() == 0
    assert balance_of(client.id) == Decimal("0.00")
    assert stock_of(product.id) == Decimal("10.00")


def test_create_invoice_rejects_unknown_type(make_client):
    client = make_client()
    with pytest.raises(ValidationError):
        invoice_service.create_invoice({
            "invoice_number": "X", "invoice_type": "gift", "client_id": client.id,
            "total": "1", "grand_total": "1", "balance": "1",
        })


def test_create_invoice_unknown_warehouse(make_client, make_invoice):
    client = make_client()
    with pytest.raises(NotFoundError):
        make_invoice(client.id, balance="5", warehouse_id=404)
    assert balance_of(client.id) == Decimal("0.00")


def test_update_invoice_nets_balance_delta(make_client, make_invoice):
    client = make_client()
    invoice = make_invoice(client.id, "sale", balance="1000").document
    invoice_service.update_invoice(invoice.id, {"balance": "1500"})
    assert balance_of(client.id) == Decimal("1500.00")


def test_update_invoice_moves_effect_between_clients(make_client, make_invoice):
    first = make_client()
    second = make_client()
    invoice = make_invoice(first.id, "sale", balance="200").document

    invoice_service.update_invoice(invoice.id, {"client_id": second.id, "balance": "250"})

    assert balance_of(first.id) == Decimal("0.00")
    assert balance_of(second.id) == Decimal("250.00")


def test_update_invoice_type_change_resigns_items(make_client, make_product, make_invoice):
    client = make_client()
    product = make_product(opening_quantity="100")
    invoice = make_invoice(client.id, "sale", balance="40", items=[item(product.id, "4")]).document
    assert stock_of(product.id) == Decimal("96.00")

    invoice_service.update_invoice(invoice.id, {"invoice_type": "purchase"})

    assert stock_of(product.id) == Decimal("104.00")
    assert balance_of(client.id) == Decimal("-40.00")


def test_update_invoice_rejects_items_payload(make_client, make_invoice):
    client = make_client()
    invoice = make_invoice(client.id, balance="1").document
    with pytest.raises(ValidationError):
        invoice_service.update_invoice(invoice.id, {"items": []})


def test_update_missing_invoice(db_session):
    with pytest.raises(NotFoundError):
        invoice_service.update_invoice(12345, {"notes": "x"})


def test_delete_invoice_reverses_balance_and_items(make_client, make_product, make_invoice):
    client = make_client(opening_balance="10")
    a = make_product(opening_quantity="30")
    b = make_product(opening_quantity="30")
    invoice = make_invoice(client.id, "sale", balance="75", items=[item(a.id, "5"), item(b.id, "1")]).document
    invoice_id = invoice.id

    result = invoice_service.delete_invoice(invoice_id)

    assert result.document["id"] == invoice_id
    assert len(result.document["items"]) == 2
    assert db.session.get(Invoice, invoice_id) is None
    assert db.session.query(InvoiceItem).filter_by(invoice_id=invoice_id).count() == 0
    assert balance_of(client.id) == Decimal("10.00")
    assert stock_of(a.id) == Decimal("30.00")
    assert stock_of(b.id) == Decimal("30.00")


def test_delete_missing_invoice(db_session):
    with pytest.raises(NotFoundError):
        invoice_service.delete_invoice(999)


def test_item_lifecycle_follows_owning_invoice_type(make_client, make_product, make_invoice):
    client = make_client()
    product = make_product(opening_quantity="10")
    invoice = make_invoice(client.id, "purchase_return", balance="0").document

    created = invoice_service.create_invoice_item(invoice.id, item(product.id, "3")).document
    assert stock_of(product.id) == Decimal("7.00")

    invoice_service.update_invoice_item(created.id, {"quantity": "5"}, invoice_id=invoice.id)
    assert stock_of(product.id) == Decimal("5.00")

    invoice_service.delete_invoice_item(created.id, invoice_id=invoice.id)
    assert stock_of(product.id) == Decimal("10.00")


def test_item_product_change_moves_stock(make_client, make_product, make_invoice):
    client = make_client()
    old = make_product(opening_quantity="50")
    new = make_product(opening_quantity="50")
    invoice = make_invoice(client.id, "sale", balance="0", items=[item(old.id, "10")]).document
    line = invoice.items[0]

    invoice_service.update_invoice_item(line.id, {"product_id": new.id, "quantity": "4"})

    assert stock_of(old.id) == Decimal("50.00")
    assert stock_of(new.id) == Decimal("46.00")


def test_item_cannot_move_between_invoices(make_client, make_product, make_invoice):
    client = make_client()
    product = make_product()
    first = make_invoice(client.id, balance="0", items=[item(product.id, "1")]).document
    second = make_invoice(client.id, balance="0").document
    with pytest.raises(ValidationError):
        invoice_service.update_invoice_item(first.items[0].id, {"invoice_id": second.id})


def test_item_lookup_is_scoped_to_invoice(make_client, make_product, make_invoice):
    client = make_client()
    product = make_product()
    first = make_invoice(client.id, balance="0", items=[item(product.id, "1")]).document
    second = make_invoice(client.id, balance="0").document
    line_id = first.items[0].id

    with pytest.raises(NotFoundError):
        invoice_service.delete_invoice_item(line_id, invoice_id=second.id)
    with pytest.raises(NotFoundError):
        invoice_service.get_invoice_item(line_id, invoice_id=second.id)
    assert invoice_service.get_invoice_item(line_id, invoice_id=first.id).id == line_id


def test_create_item_on_missing_invoice(make_product):
    product = make_product(opening_quantity="5")
    with pytest.raises(NotFoundError):
        invoice_service.create_invoice_item(777, item(product.id, "1"))
    assert stock_of(product.id) == Decimal("5.00")


def test_list_and_lookup(make_client, make_invoice):
    buyer = make_client()
    other = make_client()
    make_invoice(buyer.id, "sale", balance="1", invoice_number="S-1")
    make_invoice(buyer.id, "purchase", balance="1")
    make_invoice(other.id, "sale", balance="1")

    assert len(invoice_service.list_invoices(client_id=buyer.id)) == 2
    assert len(invoice_service.list_invoices(invoice_type="بيع")) == 2
    assert invoice_service.get_invoice_by_number("S-1").client_id == buyer.id
    with pytest.raises(NotFoundError):
        invoice_service.get_invoice_by_number("nope")
    with pytest.raises(NotFoundError):
        invoice_service.list_invoice_items(4040)
