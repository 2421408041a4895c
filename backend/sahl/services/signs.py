# Overview: The single sign table for balance and stock deltas.

"""
Sign rules (authoritative)

Every create/update/delete path derives its delta from these two functions;
no other module decides a sign.

| type             | balance | stock |
|------------------|---------|-------|
| sale             |   +1    |  -1   |
| purchase         |   -1    |  +1   |
| sale_return      |   -1    |  +1   |
| purchase_return  |   +1    |  -1   |
| receipt          |   -1    |  n/a  |
| payment          |   +1    |  n/a  |

A document's contribution to an aggregate is sign * value; its reversal is
-(sign * value) computed from the row as it was BEFORE the mutation.
"""

from __future__ import annotations

from ..validation import ValidationError

SALE = "sale"
PURCHASE = "purchase"
SALE_RETURN = "sale_return"
PURCHASE_RETURN = "purchase_return"
RECEIPT = "receipt"
PAYMENT = "payment"

INVOICE_TYPES = (SALE, PURCHASE, SALE_RETURN, PURCHASE_RETURN)
TRANSACTION_TYPES = (RECEIPT, PAYMENT)

_BALANCE_SIGNS = {
    SALE: 1,
    PURCHASE: -1,
    SALE_RETURN: -1,
    PURCHASE_RETURN: 1,
    RECEIPT: -1,
    PAYMENT: 1,
}

_STOCK_SIGNS = {
    SALE: -1,
    PURCHASE: 1,
    SALE_RETURN: 1,
    PURCHASE_RETURN: -1,
}

# Labels used by the Arabic UI and older data.
_INVOICE_ALIASES = {
    "بيع": SALE,
    "شراء": PURCHASE,
    "مرتجع بيع": SALE_RETURN,
    "مرتجع شراء": PURCHASE_RETURN,
    "sale-return": SALE_RETURN,
    "purchase-return": PURCHASE_RETURN,
}

_TRANSACTION_ALIASES = {
    "قبض": RECEIPT,
    "صرف": PAYMENT,
}

CLIENT_TYPES = ("customer", "supplier", "employee", "other")
_CLIENT_TYPE_ALIASES = {
    "عميل": "customer",
    "مورد": "supplier",
    "موظف": "employee",
    "أخرى": "other",
}

ACCOUNT_TYPES = ("debit", "credit")
_ACCOUNT_TYPE_ALIASES = {
    "مدين": "debit",
    "دائن": "credit",
}


def _normalize(value, canonical: tuple[str, ...], aliases: dict[str, str], label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    key = value.strip()
    lowered = key.lower()
    if lowered in canonical:
        return lowered
    if lowered in aliases:
        return aliases[lowered]
    if key in aliases:
        return aliases[key]
    raise ValidationError(f"Unknown {label}: {value}")


def normalize_invoice_type(value) -> str:
    return _normalize(value, INVOICE_TYPES, _INVOICE_ALIASES, "invoice_type")


def normalize_transaction_type(value) -> str:
    return _normalize(value, TRANSACTION_TYPES, _TRANSACTION_ALIASES, "transaction_type")


def normalize_client_type(value) -> str:
    return _normalize(value, CLIENT_TYPES, _CLIENT_TYPE_ALIASES, "client type")


def normalize_account_type(value) -> str:
    return _normalize(value, ACCOUNT_TYPES, _ACCOUNT_TYPE_ALIASES, "account_type")


def balance_sign(document_type: str) -> int:
    """Sign of an invoice's balance or a transaction's amount on the client balance."""
    try:
        return _BALANCE_SIGNS[document_type]
    except KeyError:
        raise ValidationError(f"No balance rule for document type {document_type!r}")


def stock_sign(invoice_type: str) -> int:
    """Sign of an item's quantity on product stock, keyed on the owning invoice's type."""
    try:
        return _STOCK_SIGNS[invoice_type]
    except KeyError:
        raise ValidationError(f"No stock rule for invoice type {invoice_type!r}")
