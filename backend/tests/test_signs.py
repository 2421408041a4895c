import pytest

from sahl.services.signs import (
    balance_sign,
    normalize_account_type,
    normalize_client_type,
    normalize_invoice_type,
    normalize_transaction_type,
    stock_sign,
)
from sahl.validation import ValidationError


@pytest.mark.parametrize("doc_type,expected", [
    ("sale", 1),
    ("purchase", -1),
    ("sale_return", -1),
    ("purchase_return", 1),
    ("receipt", -1),
    ("payment", 1),
])
def test_balance_sign_table(doc_type, expected):
    assert balance_sign(doc_type) == expected


@pytest.mark.parametrize("invoice_type,expected", [
    ("sale", -1),
    ("purchase", 1),
    ("sale_return", 1),
    ("purchase_return", -1),
])
def test_stock_sign_table(invoice_type, expected):
    assert stock_sign(invoice_type) == expected


def test_cash_transactions_have_no_stock_rule():
    with pytest.raises(ValidationError):
        stock_sign("receipt")
    with pytest.raises(ValidationError):
        stock_sign("payment")


def test_unknown_type_has_no_balance_rule():
    with pytest.raises(ValidationError):
        balance_sign("gift")


@pytest.mark.parametrize("raw,expected", [
    ("بيع", "sale"),
    ("شراء", "purchase"),
    ("مرتجع بيع", "sale_return"),
    ("مرتجع شراء", "purchase_return"),
    (" SALE ", "sale"),
    ("purchase-return", "purchase_return"),
])
def test_invoice_type_aliases(raw, expected):
    assert normalize_invoice_type(raw) == expected


def test_transaction_type_aliases():
    assert normalize_transaction_type("قبض") == "receipt"
    assert normalize_transaction_type("صرف") == "payment"
    assert normalize_transaction_type("Receipt") == "receipt"


def test_client_and_account_type_aliases():
    assert normalize_client_type("مورد") == "supplier"
    assert normalize_client_type("employee") == "employee"
    assert normalize_account_type("دائن") == "credit"


@pytest.mark.parametrize("raw", ["", "   ", None, 5, "refund"])
def test_invalid_invoice_types_rejected(raw):
    with pytest.raises(ValidationError):
        normalize_invoice_type(raw)
