# Overview: Recompute cached balances and stock from document history; detect and repair drift.

"""
Reconciliation

The cached aggregates must equal:
    Client.balance         == opening_balance + SUM(sign * invoice.balance) + SUM(sign * tx.amount)
    Product.stock_quantity == opening_quantity + SUM(stock_sign(invoice type) * item.quantity)

Sums are taken per (entity, document type) in SQL and signed with the same
sign table the document operations use.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..models import Client, Invoice, InvoiceItem, Product, Transaction
from ..money_utils import ZERO, to_decimal, to_str
from .concurrency import begin_write, lock_for_update, run_with_retry
from .errors import NotFoundError
from .ledger_service import signed
from .signs import balance_sign, stock_sign

logger = logging.getLogger(__name__)


def _document_balance_effects(client_id: int | None = None) -> dict[int, Decimal]:
    effects: dict[int, Decimal] = defaultdict(lambda: ZERO)

    invoice_q = db.session.query(
        Invoice.client_id, Invoice.invoice_type, func.sum(Invoice.balance)
    ).group_by(Invoice.client_id, Invoice.invoice_type)
    tx_q = db.session.query(
        Transaction.client_id, Transaction.transaction_type, func.sum(Transaction.amount)
    ).group_by(Transaction.client_id, Transaction.transaction_type)
    if client_id is not None:
        invoice_q = invoice_q.filter(Invoice.client_id == client_id)
        tx_q = tx_q.filter(Transaction.client_id == client_id)

    for cid, doc_type, total in list(invoice_q.all()) + list(tx_q.all()):
        effects[cid] += signed(balance_sign(doc_type), total)
    return effects


def _document_stock_effects(product_id: int | None = None) -> dict[int, Decimal]:
    effects: dict[int, Decimal] = defaultdict(lambda: ZERO)

    q = (
        db.session.query(InvoiceItem.product_id, Invoice.invoice_type, func.sum(InvoiceItem.quantity))
        .join(Invoice, Invoice.id == InvoiceItem.invoice_id)
        .group_by(InvoiceItem.product_id, Invoice.invoice_type)
    )
    if product_id is not None:
        q = q.filter(InvoiceItem.product_id == product_id)

    for pid, invoice_type, total in q.all():
        effects[pid] += signed(stock_sign(invoice_type), total)
    return effects


def expected_client_balance(client_id: int) -> Decimal:
    client = db.session.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client", client_id)
    return to_decimal(client.opening_balance) + _document_balance_effects(client_id)[client_id]


def expected_product_stock(product_id: int) -> Decimal:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return to_decimal(product.opening_quantity) + _document_stock_effects(product_id)[product_id]


def _drift_row(entity: str, entity_id: int, cached, expected: Decimal) -> dict:
    cached = to_decimal(cached)
    return {
        "entity": entity,
        "id": entity_id,
        "cached": to_str(cached),
        "expected": to_str(expected),
        "difference": to_str(cached - expected),
    }


def find_drift() -> list[dict]:
    """Every client and product whose cached aggregate disagrees with its documents."""
    drift: list[dict] = []

    balance_effects = _document_balance_effects()
    for client in db.session.query(Client).order_by(Client.id).all():
        expected = to_decimal(client.opening_balance) + balance_effects[client.id]
        if to_decimal(client.balance) != expected:
            drift.append(_drift_row("client", client.id, client.balance, expected))

    stock_effects = _document_stock_effects()
    for product in db.session.query(Product).order_by(Product.id).all():
        expected = to_decimal(product.opening_quantity) + stock_effects[product.id]
        if to_decimal(product.stock_quantity) != expected:
            drift.append(_drift_row("product", product.id, product.stock_quantity, expected))

    return drift


def repair_drift() -> list[dict]:
    """Overwrite drifted aggregates with recomputed values in one transaction; returns what changed."""
    def _op():
        begin_write()
        changes = find_drift()
        for row in changes:
            model = Client if row["entity"] == "client" else Product
            target = lock_for_update(db.session.query(model).filter_by(id=row["id"])).first()
            expected = to_decimal(row["expected"])
            if model is Client:
                target.balance = expected
            else:
                target.stock_quantity = expected
            logger.warning(
                "Repaired %s %s: cached %s -> %s", row["entity"], row["id"], row["cached"], row["expected"]
            )
        db.session.commit()
        return changes

    return run_with_retry(_op)


def set_client_balance(client_id: int, value) -> Client:
    """
    Maintenance escape hatch: force a client's balance.

    The opening balance moves by the same amount so the balance invariant
    still holds against the unchanged document history.
    """
    value = to_decimal(value)

    def _op():
        begin_write()
        client = lock_for_update(db.session.query(Client).filter_by(id=client_id)).first()
        if client is None:
            raise NotFoundError("Client", client_id)
        shift = value - to_decimal(client.balance)
        client.opening_balance = to_decimal(client.opening_balance) + shift
        client.balance = value
        logger.warning("Client %s balance set to %s by maintenance (opening shifted by %s)", client_id, value, shift)
        db.session.commit()
        return client

    return run_with_retry(_op)


def set_product_stock(product_id: int, value) -> Product:
    """Stock-count correction: force stock_quantity, shifting opening_quantity to match."""
    value = to_decimal(value)

    def _op():
        begin_write()
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if product is None:
            raise NotFoundError("Product", product_id)
        shift = value - to_decimal(product.stock_quantity)
        product.opening_quantity = to_decimal(product.opening_quantity) + shift
        product.stock_quantity = value
        logger.warning("Product %s stock set to %s by maintenance (opening shifted by %s)", product_id, value, shift)
        db.session.commit()
        return product

    return run_with_retry(_op)
