"""HTTP layer: status codes, response shapes and ledger warnings."""

import pytest

from sahl.services import warehouse_service


@pytest.fixture
def api(client, db_session):
    return client


def _create_client(api, **overrides):
    body = {"name": "Api Client", "type": "customer", "account_type": "debit"}
    body.update(overrides)
    resp = api.post("/api/clients", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["client"]


def _create_product(api, code="API-1", **overrides):
    body = {"code": code, "name": "Api Product", "opening_quantity": "500"}
    body.update(overrides)
    resp = api.post("/api/products", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["product"]


def test_health(api):
    resp = api.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_invoice_lifecycle_over_http(api):
    client = _create_client(api)
    product = _create_product(api)

    resp = api.post("/api/invoices", json={
        "invoice_number": "H-1",
        "invoice_type": "sale",
        "client_id": client["id"],
        "total": "1000",
        "grand_total": "1000",
        "balance": "1000",
        "items": [{"product_id": product["id"], "quantity": "50", "unit_price": "20", "total": "1000"}],
    })
    assert resp.status_code == 201
    payload = resp.get_json()
    assert payload["warnings"] == []
    invoice = payload["invoice"]
    assert invoice["balance"] == "1000.00"
    assert len(invoice["items"]) == 1

    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "1000.00"
    assert api.get(f"/api/products/{product['id']}").get_json()["product"]["stock_quantity"] == "450.00"

    resp = api.patch(f"/api/invoices/{invoice['id']}", json={"balance": "1500"})
    assert resp.status_code == 200
    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "1500.00"

    item_id = invoice["items"][0]["id"]
    resp = api.put(f"/api/invoices/{invoice['id']}/items/{item_id}", json={"quantity": "60"})
    assert resp.status_code == 200
    assert resp.get_json()["item"]["quantity"] == "60.00"
    assert api.get(f"/api/products/{product['id']}").get_json()["product"]["stock_quantity"] == "440.00"

    resp = api.delete(f"/api/invoices/{invoice['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["invoice"]["id"] == invoice["id"]
    assert api.get(f"/api/invoices/{invoice['id']}").status_code == 404
    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "0.00"
    assert api.get(f"/api/products/{product['id']}").get_json()["product"]["stock_quantity"] == "500.00"


def test_invoice_items_endpoints(api):
    client = _create_client(api)
    product = _create_product(api)
    invoice = api.post("/api/invoices", json={
        "invoice_number": "H-2", "invoice_type": "purchase", "client_id": client["id"],
        "total": "0", "grand_total": "0", "balance": "0",
    }).get_json()["invoice"]

    resp = api.post(f"/api/invoices/{invoice['id']}/items", json={
        "product_id": product["id"], "quantity": "5", "unit_price": "1", "total": "5",
    })
    assert resp.status_code == 201
    item_id = resp.get_json()["item"]["id"]

    listed = api.get(f"/api/invoices/{invoice['id']}/items").get_json()
    assert listed["count"] == 1
    assert api.get(f"/api/invoices/{invoice['id']}/items/{item_id}").status_code == 200

    resp = api.delete(f"/api/invoices/{invoice['id']}/items/{item_id}")
    assert resp.status_code == 200
    assert resp.get_json()["item"]["id"] == item_id
    assert api.get(f"/api/products/{product['id']}").get_json()["product"]["stock_quantity"] == "500.00"


def test_transaction_endpoints(api):
    client = _create_client(api, opening_balance="1000")
    resp = api.post("/api/transactions", json={
        "transaction_number": "R-1", "transaction_type": "قبض", "client_id": client["id"], "amount": "400",
    })
    assert resp.status_code == 201
    tx = resp.get_json()["transaction"]
    assert tx["transaction_type"] == "receipt"
    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "600.00"

    assert api.get("/api/transactions?type=receipt").get_json()["count"] == 1
    assert api.get("/api/transactions/by-number/R-1").status_code == 200
    assert api.delete(f"/api/transactions/{tx['id']}").status_code == 200
    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "1000.00"


def test_missing_client_warning_surfaces_in_response(api):
    resp = api.post("/api/transactions", json={
        "transaction_number": "R-2", "transaction_type": "payment", "client_id": 777, "amount": "1",
    })
    assert resp.status_code == 201
    assert "Client 777 not found" in resp.get_json()["warnings"][0]


def test_strict_policy_maps_to_404(api, strict_policy):
    resp = api.post("/api/transactions", json={
        "transaction_number": "R-3", "transaction_type": "payment", "client_id": 777, "amount": "1",
    })
    assert resp.status_code == 404
    assert api.get("/api/transactions").get_json()["count"] == 0


@pytest.mark.parametrize("path,body", [
    ("/api/invoices", {"invoice_type": "sale"}),
    ("/api/transactions", {"transaction_number": "X", "transaction_type": "receipt", "client_id": 1, "amount": "x"}),
    ("/api/transactions", {"transaction_number": "X", "transaction_type": "receipt", "client_id": 1, "amount": "1e40"}),
    ("/api/invoices", {"invoice_number": "X", "invoice_type": "sale", "client_id": 1, "total": "1e40", "grand_total": "1", "balance": "1"}),
    ("/api/clients", {"name": "X", "type": "x", "account_type": "debit"}),
    ("/api/products", {"name": "no code"}),
])
def test_validation_errors_are_400(api, path, body):
    resp = api.post(path, json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_conflicts_are_409(api):
    client = _create_client(api)
    _create_product(api, code="DUP")
    assert api.post("/api/products", json={"code": "DUP", "name": "again"}).status_code == 409

    api.post("/api/transactions", json={
        "transaction_number": "R-4", "transaction_type": "receipt", "client_id": client["id"], "amount": "1",
    })
    assert api.delete(f"/api/clients/{client['id']}").status_code == 409


def test_client_balance_is_read_only(api):
    client = _create_client(api)
    resp = api.patch(f"/api/clients/{client['id']}", json={"balance": "99"})
    assert resp.status_code == 400


def test_warehouses_and_settings(api):
    main = warehouse_service.ensure_default_warehouse()
    assert api.delete(f"/api/warehouses/{main.id}").status_code == 409

    resp = api.post("/api/warehouses", json={"name": "Annex"})
    assert resp.status_code == 201
    annex_id = resp.get_json()["warehouse"]["id"]
    assert api.get("/api/warehouses").get_json()["count"] == 2
    assert api.delete(f"/api/warehouses/{annex_id}").status_code == 200

    assert api.get("/api/settings").get_json()["settings"]["currency_symbol"] == "ج.م"
    resp = api.put("/api/settings", json={"company_name": "Sahl"})
    assert resp.status_code == 200
    assert resp.get_json()["settings"]["company_name"] == "Sahl"


def test_batch_endpoint_reports_partial_progress(api):
    client = _create_client(api)
    row = {"invoice_type": "sale", "client_id": client["id"], "total": "1", "grand_total": "1", "balance": "1"}

    resp = api.post("/api/batch/invoices/create", json={"rows": [
        dict(row, invoice_number="BA-1"),
        dict(row, invoice_number="BA-2"),
        dict(row, invoice_number="BA-3", invoice_type="bogus"),
    ]})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["index"] == 2
    assert len(body["completed_ids"]) == 2
    assert api.get(f"/api/clients/{client['id']}").get_json()["client"]["balance"] == "2.00"


def test_batch_recode_endpoint(api):
    _create_product(api, code="R1")
    _create_product(api, code="R2")
    ids = [p["id"] for p in api.get("/api/products").get_json()["items"]]

    resp = api.post("/api/batch/products/recode", json={"field": "category", "value": "tools", "ids": ids})

    assert resp.status_code == 200
    assert resp.get_json()["batch"]["count"] == 2
    assert api.post("/api/batch/products/explode", json={}).status_code == 404


def test_ledger_drift_endpoints(api):
    client = _create_client(api)
    api.post("/api/invoices", json={
        "invoice_number": "D-1", "invoice_type": "sale", "client_id": client["id"],
        "total": "10", "grand_total": "10", "balance": "10",
    })
    assert api.get("/api/ledger/drift").get_json()["count"] == 0
    resp = api.post("/api/ledger/repair")
    assert resp.status_code == 200
    assert resp.get_json()["repaired"] == []
